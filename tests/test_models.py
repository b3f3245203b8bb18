"""Tests for models."""

from datetime import date, datetime, timezone

import pytest

from trackline.core.exceptions import WindowParseError
from trackline.models.history import HistorySnapshot
from trackline.models.location import GPSCoordinates, LocationRecord, NewLocation, PositionSample
from trackline.models.tracking import TrackingState, TrackingStatus
from trackline.models.window import TimeOfDay, TimeWindow

from conftest import make_record


class TestGPSCoordinates:
    """Tests for GPSCoordinates."""

    def test_str(self):
        """Test string representation."""
        coords = GPSCoordinates(latitude=50.042305, longitude=15.760400)
        assert str(coords) == "50.042305, 15.760400"

    def test_is_valid(self):
        """Test coordinate range check."""
        assert GPSCoordinates(latitude=90.0, longitude=-180.0).is_valid
        assert not GPSCoordinates(latitude=90.5, longitude=0.0).is_valid
        assert not GPSCoordinates(latitude=0.0, longitude=181.0).is_valid

    def test_distance_to_same_point(self):
        """Test distance to the same point."""
        coords = GPSCoordinates(latitude=50.0, longitude=15.0)
        assert coords.distance_to(coords) == pytest.approx(0.0)

    def test_distance_to_known_distance(self):
        """Test distance between Prague and Brno (~185 km)."""
        prague = GPSCoordinates(latitude=50.0755, longitude=14.4378)
        brno = GPSCoordinates(latitude=49.1951, longitude=16.6068)
        distance = prague.distance_to(brno)
        assert 180 < distance < 190


class TestPositionSample:
    """Tests for PositionSample."""

    def test_from_dict_missing_optional_fields(self):
        """Missing accuracy/altitude stay absent, not zero."""
        sample = PositionSample.from_dict({"latitude": 50.1, "longitude": 14.4})
        assert sample.accuracy is None
        assert sample.altitude is None

    def test_from_dict_keeps_zero(self):
        """A reported zero is kept as zero."""
        sample = PositionSample.from_dict(
            {"latitude": 50.1, "longitude": 14.4, "accuracy": 0, "altitude": 0}
        )
        assert sample.accuracy == 0.0
        assert sample.altitude == 0.0

    def test_from_dict_requires_coordinates(self):
        with pytest.raises(KeyError):
            PositionSample.from_dict({"latitude": 50.1})

    def test_new_location_from_sample(self):
        sample = PositionSample(latitude=1.0, longitude=2.0, altitude=300.0)
        new = NewLocation.from_sample(sample, tracker_id="austin")
        assert new.tracker_id == "austin"
        assert new.altitude == 300.0
        assert new.accuracy is None


class TestLocationRecord:
    """Tests for LocationRecord."""

    def test_to_dict_uses_store_field_names(self):
        record = make_record("x1", 2024, 6, 1, 20, 30)
        data = record.to_dict()
        assert data["trackerId"] == "operator"
        assert data["timestamp"] == "2024-06-01T20:30:00+00:00"
        assert data["accuracy"] is None

    def test_from_dict(self):
        record = LocationRecord.from_dict({
            "id": "abc",
            "timestamp": "2024-06-01T20:30:00+02:00",
            "latitude": 50.0,
            "longitude": 14.0,
            "accuracy": 8.5,
            "altitude": None,
            "trackerId": "austin",
        })
        assert record.timestamp == datetime(2024, 6, 1, 18, 30, tzinfo=timezone.utc)
        assert record.accuracy == 8.5
        assert record.altitude is None
        assert record.tracker_id == "austin"

    def test_from_dict_rejects_timestamp_without_offset(self):
        with pytest.raises(ValueError, match="without UTC offset"):
            LocationRecord.from_dict({
                "id": "abc",
                "timestamp": "2024-06-01T20:30:00",
                "latitude": 50.0,
                "longitude": 14.0,
            })

    def test_is_immutable(self):
        record = make_record("x1", 2024, 6, 1, 20, 30)
        with pytest.raises(AttributeError):
            record.latitude = 1.0


class TestHistorySnapshot:
    """Tests for HistorySnapshot."""

    def test_sorted_by_timestamp(self):
        later = make_record("b", 2024, 6, 1, 20, 30)
        earlier = make_record("a", 2024, 6, 1, 8, 0)
        snapshot = HistorySnapshot.from_records([later, earlier])
        assert [r.id for r in snapshot] == ["a", "b"]
        assert snapshot.latest.id == "b"

    def test_unique_by_id(self):
        record = make_record("a", 2024, 6, 1, 8, 0)
        snapshot = HistorySnapshot.from_records([record, record])
        assert len(snapshot) == 1

    def test_empty(self):
        snapshot = HistorySnapshot()
        assert not snapshot
        assert snapshot.latest is None
        assert snapshot.path_length_km() == 0.0

    def test_path_length(self):
        snapshot = HistorySnapshot.from_records([
            make_record("a", 2024, 6, 1, 8, 0, latitude=50.0755, longitude=14.4378),
            make_record("b", 2024, 6, 1, 9, 0, latitude=49.1951, longitude=16.6068),
        ])
        assert 180 < snapshot.path_length_km() < 190


class TestTimeWindow:
    """Tests for TimeOfDay and TimeWindow."""

    def test_parse_time_of_day(self):
        time = TimeOfDay.parse("22:05")
        assert (time.hour, time.minute) == (22, 5)
        assert time.minutes == 22 * 60 + 5
        assert str(time) == "22:05"

    def test_parse_time_with_seconds(self):
        assert TimeOfDay.parse("07:30:15") == TimeOfDay(7, 30)

    @pytest.mark.parametrize("text", ["", "7", "24:00", "12:60", "ab:cd", "1:2:3:4"])
    def test_parse_time_invalid(self, text):
        with pytest.raises(WindowParseError):
            TimeOfDay.parse(text)

    def test_defaults(self):
        window = TimeWindow.parse(today=date(2024, 6, 1))
        assert window.date == date(2024, 6, 1)
        assert str(window.start) == "19:00"
        assert str(window.end) == "21:00"
        assert not window.is_overnight

    def test_overnight(self):
        window = TimeWindow.parse("2024-06-01", "22:00", "02:00")
        assert window.is_overnight
        assert window.to_dict() == {
            "date": "2024-06-01",
            "start": "22:00",
            "end": "02:00",
            "overnight": True,
        }

    def test_invalid_date(self):
        with pytest.raises(WindowParseError):
            TimeWindow.parse("2024-13-01")

    def test_window_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            TimeWindow.parse("yesterday")


class TestTrackingStatus:
    """Tests for TrackingStatus."""

    def test_labels(self):
        assert TrackingStatus(TrackingState.IDLE).label == "Idle"
        assert TrackingStatus(TrackingState.TRACKING).label == "Tracking..."

    def test_to_dict(self):
        status = TrackingStatus(TrackingState.TRACKING, error="Failed to save location data.")
        assert status.to_dict() == {
            "state": "tracking",
            "label": "Tracking...",
            "error": "Failed to save location data.",
            "is_tracking": True,
        }
