# =============================================================================
# tests/unit/test_mapping.py
# Unit Tests for Entity <-> Row/Document Conversion
# =============================================================================

from datetime import datetime, timezone

import pytest

from salon_core.errors import EntityValidationError
from salon_core.models import DayHours, DayOfWeek, Gender, WorkingHours
from salon_core.repositories.customer_repository import customer_from_document
from salon_core.repositories.mapping import from_iso, parse_enum, to_iso
from salon_core.repositories.working_hours_repository import (
    working_hours_from_document,
    working_hours_to_document,
)


class TestTimestamps:
    def test_z_suffix_accepted(self):
        parsed = from_iso("2025-03-01T09:30:00Z")
        assert parsed == datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)

    def test_naive_treated_as_utc(self):
        assert to_iso(datetime(2025, 3, 1, 9, 30)) == "2025-03-01T09:30:00+00:00"

    def test_empty_is_none(self):
        assert from_iso("") is None
        assert to_iso(None) is None

    def test_invalid(self):
        with pytest.raises(EntityValidationError) as exc_info:
            from_iso("yesterday", "createdAt")

        assert exc_info.value.details["field"] == "createdAt"


class TestEnums:
    def test_default_for_missing(self):
        assert parse_enum(Gender, None, "gender", Gender.OTHER) == Gender.OTHER

    def test_unknown_value(self):
        with pytest.raises(EntityValidationError):
            parse_enum(Gender, "ROBOT", "gender", Gender.OTHER)


class TestDocuments:
    def test_customer_document_requires_tenant(self):
        with pytest.raises(EntityValidationError):
            customer_from_document({"id": "c1", "firstName": "Ada"})

    def test_working_hours_days_are_nested_maps(self):
        hours = WorkingHours(id="t", business_id="t").with_day(
            DayOfWeek.MONDAY, DayHours(True, "08:00", "16:00")
        )

        document = working_hours_to_document(hours)

        assert document["monday"] == {"isWorking": True, "startTime": "08:00", "endTime": "16:00"}
        assert document["sunday"]["isWorking"] is False
        assert working_hours_from_document(document) == hours

    def test_missing_day_uses_default(self):
        hours = working_hours_from_document({"id": "t", "businessId": "t"})

        assert hours.saturday == DayHours(True, "10:00", "17:00")
        assert hours.is_valid()
        assert DayOfWeek.SUNDAY.is_weekend
