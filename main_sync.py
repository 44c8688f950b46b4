#!/usr/bin/env python3
"""Command line entry point for the metadata sync."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from config.metadata import load_metadata_config
from config.settings import SETTINGS
from core.compose import compose_entity
from core.statuses import RecordKind
from core.sync import on_record_changed, resync_all
from core.utils import finalize_summary, log_step
from integrations.firebase_store import FirebaseStore
from integrations.sqlite_record_store import SqliteRecordStore
from sync_logging.errors import SyncError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="metadata-sync")
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="SQLite record store (defaults to RECORD_DB_PATH).",
    )
    sub = parser.add_subparsers(dest="command")

    changed = sub.add_parser("changed", help="Handle a record change event.")
    changed.add_argument("record_id", type=int)
    changed.add_argument("--revision", action="store_true", help="Event is a revision/autosave.")

    show = sub.add_parser("show", help="Print the composed entity without pushing it.")
    show.add_argument("entity_id", type=int)

    imp = sub.add_parser("import", help="Load a JSON export of CMS records into the store.")
    imp.add_argument("file", type=Path)

    sub.add_parser("resync", help="Push every top-level entity.")

    fetch = sub.add_parser("fetch", help="Print the value stored remotely under KEY.")
    fetch.add_argument("key")
    return parser


def _print(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    try:
        config = load_metadata_config(SETTINGS)
        store = SqliteRecordStore(args.db or SETTINGS.record_db_path, config)

        if args.command == "import":
            count = store.import_json(args.file)
            _print({"imported": count, "db": str(store.path)})
            return 0

        if args.command == "show":
            if store.get_kind(args.entity_id) is RecordKind.UNKNOWN:
                _print({"entity_id": args.entity_id, "error": "not_found"})
                return 1
            _print(compose_entity(args.entity_id, store=store, config=config))
            return 0

        remote = FirebaseStore.from_settings(SETTINGS)
        if args.command == "fetch":
            _print({"key": args.key, "value": remote.fetch(args.key)})
            return 0

        if args.command == "changed":
            outcome = on_record_changed(
                args.record_id, args.revision, store=store, remote=remote, config=config
            )
            _print(outcome.as_dict())
            return 1 if outcome.failed else 0

        outcomes = resync_all(
            store.record_ids(RecordKind.PARENT), store=store, remote=remote, config=config
        )
        _print([outcome.as_dict() for outcome in outcomes])
        return 1 if any(outcome.failed for outcome in outcomes) else 0
    except (SyncError, OSError, ValueError) as exc:
        log_step("main", "command_failed", {"command": args.command, "error": str(exc)}, severity="critical")
        _print({"command": args.command, "error": str(exc)})
        return 1
    finally:
        finalize_summary()


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
