"""
Unit tests for the stop tracker with mocked repositories.
"""

import pytest
from unittest.mock import Mock
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from models.stop import StopType
from services.stop_tracking import StopTracker, StopTrackingError, TripNotFoundError


def trip_record(estado="programado", **overrides):
    record = {
        "id": 7,
        "chofer_id": 1,
        "tractor_id": 2,
        "semirremolque_id": 3,
        "servicio_id": 1,
        "origen": "Neuquén",
        "cantidad_destinos": 2,
        "fecha_salida": "2024-01-10T06:00:00",
        "estado": estado,
        "destinos": [
            {"id": 11, "ubicacion": "Bahía Blanca", "orden": 1},
            {"id": 12, "ubicacion": "Mar del Plata", "orden": 2},
        ],
    }
    record.update(overrides)
    return record


def stored(stop):
    return {**stop.model_dump(mode="json"), "id": 100}


class TestStopTracker:
    """Test suite for the trip stop workflow."""

    @pytest.fixture
    def repos(self):
        repos = {name: Mock() for name in ("trip_repo", "stop_repo", "driver_repo", "tractor_repo", "trailer_repo")}
        repos["stop_repo"].create = Mock(side_effect=stored)
        repos["stop_repo"].get_by_trip = Mock(return_value=[])
        repos["trip_repo"].set_trip_state = Mock(side_effect=lambda trip_id, estado: {"id": trip_id, "estado": estado})
        return repos

    @pytest.fixture
    def tracker(self, repos):
        return StopTracker(**repos)

    def test_unknown_trip(self, tracker, repos):
        repos["trip_repo"].get_by_id.return_value = None
        with pytest.raises(TripNotFoundError):
            tracker.start_trip(99, 1000)

    def test_start_trip(self, tracker, repos):
        repos["trip_repo"].get_by_id.return_value = trip_record()

        stop = tracker.start_trip(7, 120500)

        assert stop["tipo"] == "inicio"
        assert stop["ubicacion"] == "Neuquén"
        repos["trip_repo"].set_trip_state.assert_called_once_with(7, "en curso")
        repos["driver_repo"].set_state.assert_called_once_with([1], "en viaje")
        repos["tractor_repo"].set_state.assert_called_once_with([2], "en viaje")
        repos["trailer_repo"].set_state.assert_called_once_with([3], "en viaje")

    def test_start_requires_programmed_trip(self, tracker, repos):
        repos["trip_repo"].get_by_id.return_value = trip_record("en curso")
        with pytest.raises(StopTrackingError):
            tracker.start_trip(7, 120500)
        repos["stop_repo"].create.assert_not_called()

    def test_rest_stop(self, tracker, repos):
        repos["trip_repo"].get_by_id.return_value = trip_record("en curso")
        repos["stop_repo"].get_by_trip.return_value = [{"tipo": "inicio", "odometro": 120500}]

        result = tracker.record_stop(7, StopType.REST, 120800, ubicacion=" Choele Choel ", destino_id=11)

        assert result["stop"]["ubicacion"] == "Choele Choel"
        assert result["stop"]["destino_id"] is None
        assert result["progress"] == {"arrivals": 0, "destinations": 2, "can_finalize": False}

    def test_stop_needs_location(self, tracker, repos):
        repos["trip_repo"].get_by_id.return_value = trip_record("en curso")
        with pytest.raises(StopTrackingError):
            tracker.record_stop(7, StopType.LOAD, 120800, ubicacion="  ")

    def test_odometer_cannot_go_back(self, tracker, repos):
        repos["trip_repo"].get_by_id.return_value = trip_record("en curso")
        repos["stop_repo"].get_by_trip.return_value = [{"tipo": "inicio", "odometro": 120500}]
        with pytest.raises(StopTrackingError):
            tracker.record_stop(7, StopType.REST, 120400, ubicacion="Choele Choel")

    def test_stops_need_trip_in_progress(self, tracker, repos):
        repos["trip_repo"].get_by_id.return_value = trip_record("programado")
        with pytest.raises(StopTrackingError):
            tracker.record_stop(7, StopType.REST, 120800, ubicacion="Choele Choel")

    def test_second_start_is_rejected(self, tracker, repos):
        repos["trip_repo"].get_by_id.return_value = trip_record("en curso")
        with pytest.raises(StopTrackingError):
            tracker.record_stop(7, StopType.START, 120800, ubicacion="Neuquén")

    def test_arrival_uses_destination_location(self, tracker, repos):
        repos["trip_repo"].get_by_id.return_value = trip_record("en curso")

        result = tracker.record_stop(7, StopType.ARRIVAL, 121000, destino_id=11)

        assert result["stop"]["ubicacion"] == "Bahía Blanca"
        assert result["progress"]["arrivals"] == 1
        repos["trip_repo"].set_trip_state.assert_not_called()

    def test_arrival_needs_trip_destination(self, tracker, repos):
        repos["trip_repo"].get_by_id.return_value = trip_record("en curso")
        with pytest.raises(StopTrackingError):
            tracker.record_stop(7, StopType.ARRIVAL, 121000, destino_id=99)
        with pytest.raises(StopTrackingError):
            tracker.record_stop(7, StopType.ARRIVAL, 121000)

    def test_destination_reached_once(self, tracker, repos):
        repos["trip_repo"].get_by_id.return_value = trip_record("en curso")
        repos["stop_repo"].get_by_trip.return_value = [
            {"tipo": "llegada", "odometro": 121000, "destino_id": 11}
        ]
        with pytest.raises(StopTrackingError):
            tracker.record_stop(7, StopType.ARRIVAL, 121500, destino_id=11)

    def test_last_arrival_finalizes(self, tracker, repos):
        repos["trip_repo"].get_by_id.return_value = trip_record("en curso")
        repos["stop_repo"].get_by_trip.return_value = [
            {"tipo": "inicio", "odometro": 120500},
            {"tipo": "llegada", "odometro": 121000, "destino_id": 11},
        ]

        result = tracker.record_stop(7, StopType.ARRIVAL, 121800, destino_id=12)

        assert result["progress"]["finalized"] is True
        repos["trip_repo"].set_trip_state.assert_called_once_with(7, "finalizado")
        repos["tractor_repo"].set_state.assert_called_once_with([2], "disponible")

    def test_finalize_needs_all_arrivals(self, tracker, repos):
        repos["trip_repo"].get_by_id.return_value = trip_record("en curso")
        repos["stop_repo"].get_by_trip.return_value = [
            {"tipo": "llegada", "odometro": 121000, "destino_id": 11}
        ]
        with pytest.raises(StopTrackingError):
            tracker.finalize_trip(7)

    def test_finalized_trip_cannot_be_finalized_again(self, tracker, repos):
        repos["trip_repo"].get_by_id.return_value = trip_record("finalizado")
        with pytest.raises(StopTrackingError):
            tracker.finalize_trip(7)
