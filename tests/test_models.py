"""
Tests for typed models and their dict adapters.
"""

import pytest

from models import (
    ALERT_END,
    ALERT_START,
    Alert,
    BoundingBox,
    CollisionConfig,
    Config,
    Detection,
    Frame,
    IntrusionConfig,
    VehicleConfig,
)
from models.config import module_config_from_dict
from models.detection import as_person, as_ppe, as_throwing, as_vehicle


class TestBoundingBox:
    def test_properties(self):
        bbox = BoundingBox(10, 20, 50, 80)
        assert bbox.width == 40
        assert bbox.height == 60
        assert bbox.center == (30, 50)
        assert bbox.bottom_center == (30, 80)
        assert bbox.area == 2400

    def test_as_tuple(self):
        bbox = BoundingBox.from_tuple([1, 2, 3, 4])
        assert bbox.as_tuple() == (1.0, 2.0, 3.0, 4.0)


class TestDetection:
    def test_from_dict_short_keys(self):
        det = Detection.from_dict({
            "track_id": 3,
            "cls": "person",
            "bbox": [0, 0, 10, 20],
            "bottom_center": [5, 20],
            "missing": ["helmet"],
            "conf": 0.8,
        })
        assert det.class_label == "person"
        assert det.bottom_center == (5.0, 20.0)
        assert det.missing_items == ("helmet",)
        assert det.confidence == pytest.approx(0.8)
        assert det.centroid is None
        assert det.speed_kmh is None

    def test_from_dict_long_keys(self):
        det = Detection.from_dict({
            "track_id": "4",
            "class_label": "car",
            "bbox": [0, 0, 10, 20],
            "centroid": [5, 10],
            "speed_kmh": 42,
            "plane_hint": 1,
        })
        assert det.track_id == 4
        assert det.centroid == (5.0, 10.0)
        assert det.speed_kmh == 42.0
        assert det.plane_hint == 1
        assert det.missing_items is None

    def test_to_dict_omits_unset_fields(self):
        det = Detection(track_id=1, class_label="normal", bbox=BoundingBox(0, 0, 1, 1))
        d = det.to_dict()
        assert d == {"track_id": 1, "cls": "normal", "bbox": [0, 0, 1, 1], "conf": 1.0}
        assert Detection.from_dict(d) == det


class TestProjections:
    def _det(self, cls, **kwargs):
        return Detection(track_id=1, class_label=cls, bbox=BoundingBox(0, 0, 10, 10), **kwargs)

    def test_as_person_requires_feet(self):
        assert as_person(self._det("person")) is None
        assert as_person(self._det("car", bottom_center=(1, 1))) is None
        view = as_person(self._det("person", bottom_center=(5, 10)))
        assert view.bottom_center == (5, 10)

    def test_as_vehicle(self):
        assert as_vehicle(self._det("car")) is None
        view = as_vehicle(self._det("forklift", centroid=(5, 5), speed_kmh=12.0))
        assert view.centroid == (5, 5)
        assert view.speed_kmh == 12.0
        assert as_vehicle(self._det("forklift", centroid=(5, 5)), ("car",)) is None

    def test_as_throwing(self):
        assert as_throwing(self._det("throwing")).label == 1
        assert as_throwing(self._det("normal")).label == 0
        assert as_throwing(self._det("person")) is None

    def test_as_ppe(self):
        assert as_ppe(self._det("person")) is None
        assert as_ppe(self._det("person", missing_items=())).missing == ()
        assert as_ppe(self._det("person", missing_items=("vest",))).missing == ("vest",)


class TestFrame:
    def test_from_dict(self):
        frame = Frame.from_dict({
            "t": 1.5,
            "detections": [{"track_id": 1, "cls": "person", "bbox": [0, 0, 1, 1]}],
        })
        assert frame.timestamp == 1.5
        assert len(frame) == 1
        assert frame.detections[0].track_id == 1

    def test_empty_frame(self):
        frame = Frame.from_dict({"t": 2})
        assert frame.timestamp == 2.0
        assert frame.detections == []
        assert frame.to_dict() == {"t": 2.0, "detections": []}


class TestAlert:
    def test_to_dict(self):
        alert = Alert(module="vehicle", state=ALERT_START, timestamp=3.2, vehicle_id=7, speed=45.3)
        stamped = alert.stamped("cam01", "2024-01-01T00:00:00+00:00")
        d = stamped.to_dict()

        assert d == {
            "camera_id": "cam01",
            "module": "vehicle",
            "state": 1,
            "detected_time": "2024-01-01T00:00:00+00:00",
            "t": 3.2,
            "vehicle_id": 7,
            "speed": 45.3,
        }
        assert alert.camera_id is None
        assert stamped.is_start

    def test_to_dict_with_violations(self):
        alert = Alert(module="ppe", state=ALERT_START, timestamp=1.0, track_id=2, violations=("helmet",))
        d = alert.to_dict()
        assert d["track_id"] == 2
        assert d["violations"] == ["helmet"]
        assert "vehicle_id" not in d

    def test_end_state(self):
        alert = Alert(module="intrusion", state=ALERT_END, timestamp=0.0)
        assert not alert.is_start


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.active_module == "intrusion"
        assert config.intrusion.buffer_size == 5
        assert config.throwing.consecutive_threshold == 10
        assert config.vehicle.speed_threshold_kmh == 30.0
        assert config.collision.collision_distance_px == 100.0
        assert config.ppe.ppe_persistence_frames == 15
        assert config.dispatcher.dedup_epsilon == 0.01
        assert config.dispatcher.stale_track_seconds is None

    def test_from_dict(self, valid_config):
        config = Config.from_dict(valid_config)
        assert config.intrusion.roi[1] == (100.0, 0.0)
        assert config.throwing.consecutive_threshold == 5
        assert config.collision.collision_buffer_frames == 3
        assert config.ppe.ppe_cooldown_seconds == 20.0

    def test_module_roi_overrides_top_level(self, valid_config):
        valid_config["modules"]["intrusion"]["roi"] = [{"x": 1, "y": 1}, {"x": 2, "y": 1}, {"x": 2, "y": 2}]
        config = Config.from_dict(valid_config)
        assert config.intrusion.roi == ((1.0, 1.0), (2.0, 1.0), (2.0, 2.0))

    def test_threshold_aliases(self):
        assert VehicleConfig.from_dict({"speed_threshold": 50}).speed_threshold_kmh == 50.0
        assert CollisionConfig.from_dict({"collision_distance": 80}).collision_distance_px == 80.0

    def test_module_config_from_dict(self):
        cfg = module_config_from_dict("intrusion", {"threshold": 2})
        assert cfg == IntrusionConfig(threshold=2)
        with pytest.raises(ValueError):
            module_config_from_dict("smoke", {})

    def test_roundtrip(self, valid_config):
        config = Config.from_dict(valid_config)
        assert Config.from_dict(config.to_dict()) == config

    def test_module_config_lookup(self):
        config = Config()
        assert config.module_config("vehicle") is config.vehicle
        with pytest.raises(ValueError):
            config.module_config("smoke")
