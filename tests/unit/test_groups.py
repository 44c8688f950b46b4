"""Tests for live-blog group extraction."""

from pathlib import Path
import json
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from config.settings import SETTINGS
from core.groups import extract_group
from core.normalize import normalize_record
from core.statuses import RecordKind
from core.values import Group

ENTRY = "_cmb_presentation_liveblog_entry"


def test_order_is_preserved():
    raw = [[{ENTRY: "e0"}, {ENTRY: "e1"}, {ENTRY: "e2"}]]
    assert extract_group(raw, ENTRY) == ["<p>e0</p>\n", "<p>e1</p>\n", "<p>e2</p>\n"]


def test_index_mapping_entries_keep_stored_order():
    raw = [{"0": {ENTRY: "first"}, "1": {ENTRY: "second"}}]
    assert extract_group(raw, ENTRY) == ["<p>first</p>\n", "<p>second</p>\n"]


def test_entries_across_several_stored_values():
    raw = [[{ENTRY: "a"}], [{ENTRY: "b"}]]
    assert extract_group(raw, ENTRY) == ["<p>a</p>\n", "<p>b</p>\n"]


def test_group_variant_accepted():
    group = Group(({ENTRY: "x"},))
    assert extract_group(group, ENTRY) == ["<p>x</p>\n"]


def test_malformed_entries_are_skipped_and_logged():
    raw = [[{ENTRY: "keep"}, {"other": "drop"}, "not-an-entry", {ENTRY: None}]]
    assert extract_group(raw, ENTRY, record_id=21) == ["<p>keep</p>\n"]

    lines = (SETTINGS.sync_logs_dir / "normalize.jsonl").read_text().splitlines()
    logged = [json.loads(line) for line in lines]
    assert [entry["position"] for entry in logged] == [1, 2, 3]
    assert all(entry["status"] == "malformed_group_entry" for entry in logged)
    assert all(entry["severity"] == "warning" for entry in logged)
    assert {entry["error_type"] for entry in logged} == {"MalformedGroupEntry"}


def test_empty_group():
    assert extract_group([], ENTRY) == []


def test_bad_entry_in_index_mapping_keeps_siblings():
    raw = [{"0": {ENTRY: "keep"}, "1": None, "2": {ENTRY: "also"}}]
    assert extract_group(raw, ENTRY, record_id=21) == ["<p>keep</p>\n", "<p>also</p>\n"]

    lines = (SETTINGS.sync_logs_dir / "normalize.jsonl").read_text().splitlines()
    assert [json.loads(line)["position"] for line in lines] == [1]


def test_index_mapping_with_list_entry_normalizes(config):
    raw = {"_cmb_presentation_liveblog": [{"0": {ENTRY: "keep"}, "1": []}]}
    record = normalize_record(1, raw, kind=RecordKind.CHILD, config=config)
    assert record["liveblog"] == ["<p>keep</p>\n"]


def test_named_mapping_is_a_single_entry():
    assert extract_group([{ENTRY: "solo", "caption": "x"}], ENTRY) == ["<p>solo</p>\n"]
