"""Unit tests for the allocation engine and normal exits."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import threading
import pytest
from unittest.mock import patch
from datetime import timedelta
from app.config import settings
from app.errors import (
    EntryNotFound, NoSlotAvailable, SlotAlreadyOccupied, SlotNotFound, ValidationError, VehicleClassMismatch,
)
from app.models.parking_record import ParkingRecord
from app.services.allocation_service import allocate
from app.services.billing_service import current_charge
from app.services.exit_service import exit_by_plate, exit_by_slot
from conftest import T0, build_layout, get_slot


@pytest.fixture
def fallback_mode(monkeypatch):
    monkeypatch.setattr(settings, "ALLOCATION_FALLBACK_TO_SCAN", True)


@pytest.fixture
def strict_mode(monkeypatch):
    monkeypatch.setattr(settings, "ALLOCATION_FALLBACK_TO_SCAN", False)


class TestAllocationService:
    def test_scan_picks_first_matching_free_slot(self, layout, strict_mode):
        record = allocate(layout, "abc123", "car", now=T0)
        assert (record.floor_number, record.slot_number) == (1, 1)
        assert record.license_plate == "ABC123"
        assert record.vehicle_type == "CAR"

        second = allocate(layout, "XYZ999", "CAR", now=T0)
        third = allocate(layout, "LMN456", "CAR", now=T0)
        assert (second.floor_number, second.slot_number) == (1, 2)
        assert (third.floor_number, third.slot_number) == (2, 1)

    def test_allocation_updates_cache(self, layout, strict_mode):
        record = allocate(layout, "ABC123", "CAR", now=T0)
        slot = get_slot(layout, 1, 1)
        assert slot.occupied is True
        assert slot.record_id == record.id
        assert slot.license_plate == "ABC123"

    def test_no_slot_available(self, layout, strict_mode):
        allocate(layout, "TRK1", "TRUCK", now=T0)
        with pytest.raises(NoSlotAvailable):
            allocate(layout, "TRK2", "TRUCK", now=T0)

    def test_no_slot_for_class_without_slots(self, layout, strict_mode):
        with pytest.raises(NoSlotAvailable):
            allocate(layout, "BUS1", "MICROBUS", now=T0)

    def test_unknown_class_rejected(self, layout, strict_mode):
        with pytest.raises(ValidationError):
            allocate(layout, "ABC123", "ZEPPELIN")

    def test_scan_ignores_stale_cache_flag(self, layout, strict_mode):
        slot = get_slot(layout, 1, 1)
        slot.occupied = True          # cache says taken, ledger says free
        layout.commit()
        record = allocate(layout, "ABC123", "CAR", now=T0)
        assert (record.floor_number, record.slot_number) == (1, 1)

    def test_scan_does_not_trust_cleared_cache(self, layout, strict_mode):
        allocate(layout, "ABC123", "CAR", now=T0)
        slot = get_slot(layout, 1, 1)
        slot.occupied = False         # cache says free, ledger says taken
        slot.record_id = None
        layout.commit()
        record = allocate(layout, "XYZ999", "CAR", now=T0)
        assert (record.floor_number, record.slot_number) == (1, 2)

    def test_preferred_slot_used_when_free(self, layout, strict_mode):
        record = allocate(layout, "ABC123", "CAR", preferred_slot=1, floor_number=2, now=T0)
        assert (record.floor_number, record.slot_number) == (2, 1)

    def test_preferred_slot_missing(self, layout, strict_mode):
        with pytest.raises(SlotNotFound):
            allocate(layout, "ABC123", "CAR", preferred_slot=9, floor_number=1)

    def test_non_positive_preferred_slot_rejected(self, layout, strict_mode):
        with pytest.raises(ValidationError):
            allocate(layout, "ABC123", "CAR", preferred_slot=0, floor_number=1)
        assert layout.query(ParkingRecord).count() == 0

    def test_preferred_slot_class_mismatch_strict(self, layout, strict_mode):
        with pytest.raises(VehicleClassMismatch):
            allocate(layout, "ABC123", "CAR", preferred_slot=3, floor_number=1)
        assert layout.query(ParkingRecord).count() == 0

    def test_preferred_slot_occupied_strict(self, layout, strict_mode):
        allocate(layout, "ABC123", "CAR", preferred_slot=1, floor_number=1, now=T0)
        with pytest.raises(SlotAlreadyOccupied):
            allocate(layout, "XYZ999", "CAR", preferred_slot=1, floor_number=1, now=T0)

    def test_preferred_slot_occupied_fallback_scans(self, layout, fallback_mode):
        allocate(layout, "ABC123", "CAR", preferred_slot=1, floor_number=1, now=T0)
        record = allocate(layout, "XYZ999", "CAR", preferred_slot=1, floor_number=1, now=T0)
        assert (record.floor_number, record.slot_number) == (1, 2)

    def test_preferred_slot_class_mismatch_fallback_scans(self, layout, fallback_mode):
        record = allocate(layout, "ABC123", "CAR", preferred_slot=3, floor_number=1, now=T0)
        assert (record.floor_number, record.slot_number) == (1, 1)

    def test_racing_allocations_only_one_succeeds(self, file_session_factory, strict_mode):
        setup = file_session_factory()
        build_layout(setup)
        setup.close()

        first, second = file_session_factory(), file_session_factory()
        try:
            # Both sessions have already read the ledger and seen slot F1-1 free
            with patch("app.services.allocation_service.find_open", return_value=None), \
                    patch("app.services.ledger_service.find_open", return_value=None):
                allocate(first, "ABC123", "CAR", preferred_slot=1, floor_number=1, now=T0)
                with pytest.raises(SlotAlreadyOccupied):
                    allocate(second, "XYZ999", "CAR", preferred_slot=1, floor_number=1, now=T0)
        finally:
            first.close()
            second.close()

        check = file_session_factory()
        open_records = check.query(ParkingRecord).filter(ParkingRecord.exit_time.is_(None)).all()
        assert [r.license_plate for r in open_records] == ["ABC123"]
        check.close()

    def test_concurrent_allocations_for_same_slot(self, file_session_factory, strict_mode):
        setup = file_session_factory()
        build_layout(setup)
        setup.close()

        barrier = threading.Barrier(2, timeout=10)
        outcomes = {}

        def park(plate):
            session = file_session_factory()
            try:
                barrier.wait()
                allocate(session, plate, "CAR", preferred_slot=1, floor_number=1, now=T0)
                outcomes[plate] = "parked"
            except SlotAlreadyOccupied:
                outcomes[plate] = "occupied"
            finally:
                session.close()

        # Both threads skip the pre-check and go straight for the insert
        with patch("app.services.allocation_service.find_open", return_value=None), \
                patch("app.services.ledger_service.find_open", return_value=None):
            threads = [threading.Thread(target=park, args=(plate,)) for plate in ("ABC123", "XYZ999")]
            for t in threads:
                t.start()
            for t in threads:
                t.join(timeout=30)

        assert sorted(outcomes.values()) == ["occupied", "parked"]
        winner = [plate for plate, outcome in outcomes.items() if outcome == "parked"][0]

        check = file_session_factory()
        open_records = check.query(ParkingRecord).filter(ParkingRecord.exit_time.is_(None)).all()
        assert [r.license_plate for r in open_records] == [winner]
        assert get_slot(check, 1, 1).license_plate == winner
        check.close()


class TestExitService:
    def test_exit_bills_and_frees_slot(self, layout, strict_mode):
        allocate(layout, "ABC123", "CAR", now=T0)
        record = exit_by_slot(layout, 1, 1, now=T0 + timedelta(minutes=61))
        assert record.billable_hours == 2
        assert record.charge == 200.0
        assert record.duration_minutes == 61
        slot = get_slot(layout, 1, 1)
        assert slot.occupied is False
        assert slot.record_id is None

    def test_preview_matches_closed_charge(self, layout, strict_mode):
        entry = allocate(layout, "ABC123", "TRUCK", now=T0)
        preview = current_charge(layout, entry, T0 + timedelta(minutes=90))
        assert preview.billable_hours == 2
        closed = exit_by_slot(layout, 2, 2, now=T0 + timedelta(minutes=90))
        assert closed.charge == preview.amount == 400.0

    def test_exit_from_empty_slot(self, layout, strict_mode):
        with pytest.raises(EntryNotFound):
            exit_by_slot(layout, 1, 1)

    def test_exit_from_non_positive_slot_rejected(self, layout, strict_mode):
        with pytest.raises(ValidationError):
            exit_by_slot(layout, -1, 1)

    def test_exit_by_plate_uses_ledger(self, layout, strict_mode):
        allocate(layout, "ABC123", "CAR", preferred_slot=1, floor_number=2, now=T0)
        slot = get_slot(layout, 2, 1)
        slot.license_plate = None      # cache lost the vehicle reference
        layout.commit()
        record = exit_by_plate(layout, "abc123", now=T0 + timedelta(minutes=30))
        assert (record.floor_number, record.slot_number) == (2, 1)
        assert record.charge == 100.0

    def test_exit_by_unknown_plate(self, layout, strict_mode):
        with pytest.raises(EntryNotFound):
            exit_by_plate(layout, "GHOST1")
