"""
Tests for Body serialization and the initial-conditions loader.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from data.bodies import DEFAULT_BODIES_PATH, load_bodies, parse_bodies
from physics.body import Body, format_timestamp, parse_timestamp


def record(**overrides):
    item = {
        "name": "Earth",
        "mass": 5.97237e24,
        "radius": 6.371e6,
        "position": [1.0, 2.0, 3.0],
        "velocity": [4.0, 5.0, 6.0],
    }
    item.update(overrides)
    return item


class TestTimestamps:

    def test_z_suffix(self):
        assert parse_timestamp("2000-01-01T12:00:00Z") == datetime(2000, 1, 1, 12, tzinfo=timezone.utc)

    def test_offset_converted(self):
        t = parse_timestamp("2000-01-01T14:00:00+02:00")
        assert t == datetime(2000, 1, 1, 12, tzinfo=timezone.utc)
        assert t.utcoffset() == timedelta(0)

    def test_naive_is_utc(self):
        assert parse_timestamp("2000-01-01T12:00:00").tzinfo is not None

    @pytest.mark.parametrize("value", ["", "yesterday", "2000-13-01T00:00:00Z", None, 42])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_timestamp(value)

    def test_format(self):
        assert format_timestamp(datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc)) == "2024-05-06T07:08:09Z"

    def test_format_keeps_microseconds(self):
        instant = datetime(2024, 5, 6, 7, 8, 9, 999, tzinfo=timezone.utc)
        assert format_timestamp(instant) == "2024-05-06T07:08:09.000999Z"
        assert parse_timestamp(format_timestamp(instant)) == instant


class TestBody:

    def test_dict_shape(self):
        body = Body.from_dict(record(timestamp="2000-01-02T00:00:00Z"))
        assert body.to_dict() == record(timestamp="2000-01-02T00:00:00Z")

    def test_epoch_body_has_no_timestamp(self):
        assert Body.from_dict(record()).to_dict()["timestamp"] is None

    def test_radius_optional(self):
        item = record()
        del item["radius"]
        assert Body.from_dict(item).radius == 0.0

    def test_copy_is_independent(self):
        body = Body.from_dict(record())
        clone = body.copy()
        clone.position[0] = 99.0
        assert body.position[0] == 1.0

    def test_copy_overrides(self):
        body = Body.from_dict(record())
        moved = body.copy(position=[7.0, 8.0, 9.0])
        assert moved.position == [7.0, 8.0, 9.0]
        assert moved.velocity == body.velocity

    @pytest.mark.parametrize("item", [
        {"name": "X"},
        record(position=[1.0, 2.0]),
        record(velocity=None),
        "not an object",
    ])
    def test_malformed(self, item):
        with pytest.raises(ValueError):
            Body.from_dict(item)


class TestLoadBodies:

    def test_shipped_data_set(self):
        bodies = load_bodies(DEFAULT_BODIES_PATH)
        names = [b.name for b in bodies]
        assert names[0] == "Sun"
        assert {"Mercury", "Venus", "Earth", "Moon", "Mars", "Jupiter",
                "Saturn", "Uranus", "Neptune"} <= set(names)
        assert all(b.mass > 0 for b in bodies)
        assert all(b.timestamp is None for b in bodies)

    def test_earth_about_one_au_from_sun(self):
        bodies = {b.name: b for b in load_bodies()}
        x, y, z = bodies["Earth"].position
        r = (x * x + y * y + z * z) ** 0.5
        assert 1.45e11 < r < 1.53e11

    def test_missing_file(self, tmp_path):
        assert load_bodies(str(tmp_path / "nope.json")) == []

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bodies.json"
        path.write_text("[{", encoding="utf-8")
        assert load_bodies(str(path)) == []

    def test_valid_file(self, tmp_path):
        path = tmp_path / "bodies.json"
        path.write_text(json.dumps([record(), record(name="Moon", mass=7.342e22)]), encoding="utf-8")
        assert [b.name for b in load_bodies(str(path))] == ["Earth", "Moon"]

    @pytest.mark.parametrize("bad", [
        record(mass=0),
        record(mass=-1.0),
        record(radius=-5.0),
        record(position=[float("nan"), 0.0, 0.0]),
        record(name=""),
    ])
    def test_invalid_record_rejects_whole_file(self, tmp_path, bad):
        path = tmp_path / "bodies.json"
        path.write_text(json.dumps([record(name="Sun", mass=1.0e30), bad]), encoding="utf-8")
        assert load_bodies(str(path)) == []

    def test_duplicate_names(self):
        with pytest.raises(ValueError):
            parse_bodies([record(), record()])

    def test_not_a_list(self):
        with pytest.raises(ValueError):
            parse_bodies({"bodies": []})
