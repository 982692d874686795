import json

import pytest

from bubblechart.model.body import Body, BubbleRecord, DatasetError, Point, validate_records
from bubblechart.model.io import dump_dataset, load_dataset


def test_from_dict_reads_external_keys():
    record = BubbleRecord.from_dict({"id": "center", "name": "Focal", "value": 65, "isCenter": True})
    assert record == BubbleRecord("center", "Focal", 65.0, True)
    assert BubbleRecord.from_dict({"id": 7, "name": "x", "value": 1}).id == "7"


def test_from_dict_rejects_missing_and_non_numeric_fields():
    with pytest.raises(DatasetError, match="missing value"):
        BubbleRecord.from_dict({"id": "a", "name": "A"})
    with pytest.raises(DatasetError, match="non-numeric"):
        BubbleRecord.from_dict({"id": "a", "name": "A", "value": "big"})
    with pytest.raises(DatasetError, match="non-numeric"):
        BubbleRecord.from_dict({"id": "a", "name": "A", "value": True})


def test_validate_accepts_good_dataset(focal_records):
    assert validate_records(focal_records) == tuple(focal_records)


def test_validate_reports_every_problem():
    records = [
        BubbleRecord("a", "A", 1, is_center=True),
        BubbleRecord("a", "A again", 2),
        BubbleRecord("b", "B", -3, is_center=True),
        BubbleRecord("c", "C", float("nan")),
    ]
    with pytest.raises(DatasetError) as exc:
        validate_records(records)

    problems = " | ".join(exc.value.problems)
    assert "duplicate ids: a" in problems
    assert "negative value" in problems
    assert "non-finite" in problems
    assert "more than one focal" in problems
    assert isinstance(exc.value, ValueError)


def test_validate_rejects_empty_id():
    with pytest.raises(DatasetError, match="empty id"):
        validate_records([BubbleRecord("", "Nameless", 1)])


def test_body_requires_positive_radius():
    with pytest.raises(ValueError):
        Body(id="a", label="A", value=0, radius=0)


def test_pin_snaps_position_and_unpin_keeps_it():
    body = Body(id="a", label="A", value=1, radius=5, x=1, y=2, vx=3, vy=4)
    body.pin(Point(50, 60))
    assert body.is_pinned
    assert body.position == (50, 60)
    assert (body.vx, body.vy) == (0, 0)

    body.unpin()
    assert not body.is_pinned
    assert body.position == (50, 60)


def test_load_dataset_round_trip(tmp_path, focal_records):
    path = tmp_path / "bubbles.json"
    dump_dataset(focal_records, path)

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw[0]["isCenter"] is True
    assert "isCenter" not in raw[1]

    assert load_dataset(path) == tuple(focal_records)


def test_load_dataset_rejects_bad_files(tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(DatasetError, match="cannot read"):
        load_dataset(broken)

    not_a_list = tmp_path / "object.json"
    not_a_list.write_text('{"id": "a"}', encoding="utf-8")
    with pytest.raises(DatasetError, match="JSON array"):
        load_dataset(not_a_list)

    with pytest.raises(DatasetError):
        load_dataset(tmp_path / "missing.json")


def test_bundled_sample_dataset_is_valid(project_root):
    records = load_dataset(project_root / "assets" / "sample_bubbles.json")
    assert len(records) == 22
    assert sum(r.is_center for r in records) == 1
