###########################################################################
##                            IMPORTS
###########################################################################

import os

import pytest

###########################################################################
##                        CUSTOM IMPORTS
###########################################################################

from mock_replay import (
    FixtureDirectoryUnreadable,
    ReplayCursor,
    load_sorted_fixtures,
    parse_created_at,
    parse_file_timestamp,
)


###########################################################################
##                      FIXTURE ORDERING TESTS
###########################################################################


def test_same_stamp_sorts_by_name(tmp_path, write_fixture):
    write_fixture("20240101_000000_b.json", {"n": "b"})
    write_fixture("20240101_000000_a.json", {"n": "a"})
    names = [f.file_name for f in load_sorted_fixtures(tmp_path)]
    assert names == ["20240101_000000_a.json", "20240101_000000_b.json"]


def test_order_independent_of_listing(tmp_path, write_fixture, monkeypatch):
    for name in ("20240301_120000_x.json", "20240101_000000_y.json", "undated.json", "20240201_080000_z.json"):
        write_fixture(name, {})
    expected = [f.file_name for f in load_sorted_fixtures(tmp_path)]

    original_iterdir = type(tmp_path).iterdir
    monkeypatch.setattr(type(tmp_path), "iterdir", lambda self: iter(sorted(original_iterdir(self), reverse=True)))
    assert [f.file_name for f in load_sorted_fixtures(tmp_path)] == expected
    assert expected == ["20240101_000000_y.json", "20240201_080000_z.json", "20240301_120000_x.json", "undated.json"]


def test_created_at_used_when_name_has_no_stamp(tmp_path, write_fixture):
    write_fixture("late.json", {"createdAt": "2024-05-01T00:00:00Z"})
    write_fixture("early.json", {"createdAt": "2024-01-01T00:00:00Z"})
    write_fixture("none.json", {})
    names = [f.file_name for f in load_sorted_fixtures(tmp_path)]
    assert names == ["early.json", "late.json", "none.json"]


def test_invalid_calendar_stamp_falls_back_to_created_at(tmp_path, write_fixture):
    write_fixture("20241399_000000_bad.json", {"createdAt": "2020-01-01T00:00:00Z"})
    write_fixture("20230101_000000_ok.json", {})
    names = [f.file_name for f in load_sorted_fixtures(tmp_path)]
    assert names == ["20241399_000000_bad.json", "20230101_000000_ok.json"]


def test_only_json_files_case_insensitive(tmp_path, write_fixture):
    write_fixture("A.JSON", {})
    write_fixture("notes.txt", "hello")
    (tmp_path / "dir.json").mkdir()
    assert [f.file_name for f in load_sorted_fixtures(tmp_path)] == ["A.JSON"]


def test_malformed_files_are_skipped(tmp_path, write_fixture):
    write_fixture("20240101_000000_good.json", {"ok": True})
    write_fixture("20240101_000001_broken.json", "{not json")
    write_fixture("20240101_000002_list.json", [1, 2])
    fixtures = load_sorted_fixtures(tmp_path)
    assert [f.file_name for f in fixtures] == ["20240101_000000_good.json"]
    assert fixtures[0].raw == {"ok": True}


def test_unreadable_directory_raises(tmp_path):
    with pytest.raises(FixtureDirectoryUnreadable):
        load_sorted_fixtures(tmp_path / "missing")


def test_timestamp_parsers():
    assert parse_file_timestamp("run_20240101_000000.json") is not None
    assert parse_file_timestamp("run_20240230_000000.json") is None
    assert parse_file_timestamp("plain.json") is None
    assert parse_created_at("2024-01-01T00:00:00+00:00") == parse_created_at("2024-01-01T00:00:00Z")
    assert parse_created_at("yesterday") is None
    assert parse_created_at(42) is None


###########################################################################
##                          CURSOR TESTS
###########################################################################


def test_cursor_without_loop_exhausts():
    cursor = ReplayCursor(["a", "b"], loop=False)
    assert [cursor.next() for _ in range(4)] == ["a", "b", None, None]
    assert cursor.exhausted


def test_cursor_with_loop_wraps():
    cursor = ReplayCursor(["a", "b"], loop=True)
    assert [cursor.next() for _ in range(3)] == ["a", "b", "a"]


def test_cursor_reset_rewinds_and_replaces_items():
    cursor = ReplayCursor(["a"], loop=False)
    cursor.next()
    cursor.reset()
    assert cursor.next() == "a"
    cursor.reset(["z"])
    assert cursor.next() == "z"


def test_empty_cursor_returns_none():
    assert ReplayCursor([], loop=True).next() is None


@pytest.mark.skipif(os.name == "nt", reason="filesystem permissions")
def test_unlistable_directory_raises(tmp_path):
    locked = tmp_path / "locked"
    locked.mkdir()
    locked.chmod(0)
    try:
        if os.access(locked, os.R_OK):
            pytest.skip("running with elevated permissions")
        with pytest.raises(FixtureDirectoryUnreadable):
            load_sorted_fixtures(locked)
    finally:
        locked.chmod(0o755)


def test_deeply_nested_file_is_skipped(tmp_path, write_fixture):
    write_fixture("20250101_090000_a.json", {"paths": []})
    write_fixture("20250101_090100_b.json", "[" * 200000)
    assert [f.file_name for f in load_sorted_fixtures(tmp_path)] == ["20250101_090000_a.json"]


@pytest.mark.parametrize("value", ["2025-01-01T09:00:00.5Z", "20250101T090000Z", "2025-01-01T09:00:00.123456+00:00"])
def test_created_at_accepts_iso_variants(value):
    assert parse_created_at(value) is not None
