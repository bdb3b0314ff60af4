"""
Unit tests for the expiry calculator.

Covers day offsets, classification thresholds, badge text and the
per-document annotation used by listing views.
"""

import pytest
from datetime import date, datetime, timedelta
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from models.driver import Driver
from models.eligibility import ExpiryStatus
from models.trailer import Trailer
from services.expiry import annotate_documents, badge_text, classify, days_until, document_statuses


class TestDaysUntil:
    """Test suite for days_until."""

    def test_same_day_is_zero(self, reference_date):
        assert days_until(date(2024, 1, 10), reference_date) == 0

    def test_time_of_day_is_ignored(self):
        assert days_until(datetime(2024, 1, 10, 0, 1), datetime(2024, 1, 10, 23, 59)) == 0
        assert days_until("2024-01-11T00:00:00Z", datetime(2024, 1, 10, 23, 59)) == 1

    def test_past_expiry_is_negative(self, reference_date):
        assert days_until(date(2024, 1, 1), reference_date) == -9

    def test_iso_strings(self):
        assert days_until("2024-01-15", "2024-01-10") == 5

    def test_absent_expiry(self, reference_date):
        assert days_until(None, reference_date) is None
        assert days_until("", reference_date) is None

    def test_missing_reference_raises(self):
        with pytest.raises(ValueError):
            days_until(date(2024, 1, 10), None)


class TestClassify:
    """Test suite for classify."""

    @pytest.mark.parametrize("days,expected", [
        (-1, ExpiryStatus.EXPIRED),
        (0, ExpiryStatus.EXPIRING_SOON),
        (30, ExpiryStatus.EXPIRING_SOON),
        (31, ExpiryStatus.VALID),
    ])
    def test_default_threshold(self, days, expected):
        assert classify(days) == expected

    def test_custom_threshold(self):
        assert classify(7, threshold=7) == ExpiryStatus.EXPIRING_SOON
        assert classify(8, threshold=7) == ExpiryStatus.VALID

    def test_none(self):
        assert classify(None) is None


CALENDAR_DATES = [
    date(2024, 2, 28),
    date(2024, 2, 29),
    date(2024, 3, 1),
    date(2023, 2, 28),
    date(2023, 12, 31),
    date(2024, 1, 1),
    date(2024, 1, 31),
    date(2100, 2, 28),
]


class TestCalendarBoundaries:
    """Offsets and buckets across leap days, month ends and year ends."""

    @pytest.mark.parametrize("expiry,reference,expected", [
        (date(2024, 3, 1), date(2024, 2, 28), 2),
        (date(2023, 3, 1), date(2023, 2, 28), 1),
        (date(2024, 2, 29), date(2024, 3, 1), -1),
        (date(2024, 1, 1), date(2023, 12, 31), 1),
        (date(2023, 12, 31), date(2024, 1, 1), -1),
        (date(2024, 3, 1), date(2024, 1, 31), 30),
        (date(2024, 12, 31), date(2023, 12, 31), 366),
        (date(2023, 12, 31), date(2022, 12, 31), 365),
        (date(2100, 3, 1), date(2100, 2, 28), 1),
    ])
    def test_exact_offsets(self, expiry, reference, expected):
        assert days_until(expiry, reference) == expected
        assert days_until(reference, expiry) == -expected

    @pytest.mark.parametrize("day", CALENDAR_DATES)
    def test_date_against_itself_is_zero(self, day):
        assert days_until(day, day) == 0
        assert days_until(day.isoformat(), datetime(day.year, day.month, day.day, 23, 59)) == 0

    @pytest.mark.parametrize("reference", CALENDAR_DATES)
    def test_buckets_around_thresholds(self, reference):
        def bucket(offset):
            return classify(days_until(reference + timedelta(days=offset), reference))

        assert bucket(-1) == ExpiryStatus.EXPIRED
        assert bucket(0) == ExpiryStatus.EXPIRING_SOON
        assert bucket(30) == ExpiryStatus.EXPIRING_SOON
        assert bucket(31) == ExpiryStatus.VALID

    @pytest.mark.parametrize("reference", CALENDAR_DATES)
    def test_classification_is_monotonic(self, reference):
        rank = {ExpiryStatus.EXPIRED: 0, ExpiryStatus.EXPIRING_SOON: 1, ExpiryStatus.VALID: 2}
        ranks = [
            rank[classify(days_until(reference + timedelta(days=offset), reference))]
            for offset in range(-40, 400)
        ]
        assert ranks == sorted(ranks)


class TestBadgeText:
    """Test suite for badge_text."""

    def test_badges(self):
        assert badge_text(None) == "Sin fecha"
        assert badge_text(-3) == "Vencido"
        assert badge_text(0) == "Vence hoy"
        assert badge_text(1) == "Vence mañana"
        assert badge_text(12) == "12 días"
        assert badge_text(90) == "Vigente"


class TestDocumentStatuses:
    """Test suite for per-document annotation."""

    def test_trailer_only_lists_service_documents(self, reference_date):
        trailer = Trailer(
            nombre="Cisterna 1",
            dominio="AC123BD",
            tipo_servicio="Gas Licuado",
            vencimiento_rto=date(2023, 1, 1),
            vencimiento_mangueras=date(2024, 1, 20),
            vencimiento_valvula_flujo=date(2023, 12, 31)
        )

        statuses = document_statuses(trailer, reference_date)

        assert [s.kind for s in statuses] == ["mangueras", "prueba_hidraulica", "valvula_flujo"]
        assert statuses[0].days == 10
        assert statuses[0].status == ExpiryStatus.EXPIRING_SOON
        assert statuses[1].expiry is None
        assert statuses[1].status is None
        assert statuses[1].badge == "Sin fecha"
        assert statuses[2].status == ExpiryStatus.EXPIRED
        assert statuses[2].label == "Válvula de Flujo"

    def test_annotate_documents_keeps_record(self, reference_date):
        record = {
            "id": 4,
            "nombre": "Juan",
            "apellido": "Pérez",
            "dni": "25678901",
            "fecha_vencimiento_licencia": "2024-01-10",
            "created_at": "2023-06-01T12:00:00+00:00"
        }

        result = annotate_documents(record, Driver, reference_date)

        assert result["id"] == 4
        assert result["created_at"] == record["created_at"]
        assert "documentos" not in record
        assert result["documentos"] == [{
            "kind": "license",
            "label": "license",
            "expiry": "2024-01-10",
            "days": 0,
            "status": "expiring-soon",
            "badge": "Vence hoy"
        }]
