"""
Tests for the part diff engine.

Parts are matched by id only; every matched part is re-written.
"""
from services.diff_engine import compute_diff
from conftest import make_part


def test_disjoint_sets_are_partitioned():
    remote = [make_part("1", "A1"), make_part("2", "A2"), make_part("4", "A4")]
    target = [make_part("1", "A1"), make_part("3", "A3"), make_part("4", "A4x")]

    diff = compute_diff(remote, target)

    assert diff.to_delete == {"2"}
    assert [p.id for p in diff.to_update] == ["1", "4"]
    assert [p.id for p in diff.to_insert] == ["3"]

    remote_ids = {p.id for p in remote}
    target_ids = {p.id for p in target}
    assert diff.total_operations == len(remote_ids | target_ids)


def test_identical_lists_rewrite_every_part():
    parts = [make_part("1", "A1", 3), make_part("2", "A2", 0)]

    diff = compute_diff(parts, [p.copy() for p in parts])

    assert diff.to_delete == set()
    assert diff.to_insert == []
    # No field-level change detection: unchanged parts are still updated
    assert [p.id for p in diff.to_update] == ["1", "2"]


def test_empty_remote_inserts_everything():
    target = [make_part("tmp-a", "X1"), make_part("tmp-b", "X2")]

    diff = compute_diff([], target)

    assert diff.to_delete == set()
    assert diff.to_update == []
    assert diff.to_insert == target


def test_empty_target_deletes_everything():
    remote = [make_part("1", "A1"), make_part("2", "A2")]

    diff = compute_diff(remote, [])

    assert diff.to_delete == {"1", "2"}
    assert diff.to_update == []
    assert diff.to_insert == []


def test_accepts_flat_store_records():
    remote = [{"id": 1, "part_number": "A1"}, {"id": 2, "part_number": "A2"}]
    target = [make_part("1", "A1"), make_part("tmp-3", "A3")]

    diff = compute_diff(remote, target)

    assert diff.to_delete == {"2"}
    assert [p.id for p in diff.to_update] == ["1"]
    assert [p.id for p in diff.to_insert] == ["tmp-3"]


def test_inputs_not_mutated():
    remote = [make_part("1", "A1")]
    target = [make_part("2", "A2")]

    compute_diff(remote, target)

    assert [p.id for p in remote] == ["1"]
    assert [p.id for p in target] == ["2"]
