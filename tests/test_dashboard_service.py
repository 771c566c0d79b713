"""Unit tests for dashboard read models."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import timedelta
from app.services.allocation_service import allocate
from app.services.dashboard_service import dashboard_stats, slot_detail
from app.services.exit_service import exit_by_slot
from conftest import T0, get_slot


class TestDashboardService:
    def test_stats_count_from_ledger(self, layout):
        allocate(layout, "ABC123", "CAR", now=T0)
        allocate(layout, "XYZ999", "CAR", now=T0)
        exit_by_slot(layout, 2, 1, now=T0 + timedelta(minutes=30))
        stale = get_slot(layout, 2, 2)
        stale.occupied = True            # cache drift must not be counted
        layout.commit()

        stats = dashboard_stats(layout, now=T0 + timedelta(hours=1))

        assert stats.total_slots == 5
        assert stats.occupied_slots == 1
        assert stats.available_slots == 4
        assert stats.currently_parked_vehicles == 1
        assert stats.vehicles_parked_today == 2
        assert stats.today_revenue == 100.0

    def test_slot_detail_for_parked_vehicle(self, layout):
        allocate(layout, "ABC123", "BIKE", now=T0)
        detail = slot_detail(layout, 3, floor_number=1, now=T0 + timedelta(minutes=150))
        assert detail.occupied is True
        assert detail.license_plate == "ABC123"
        assert detail.duration_minutes == 150
        assert detail.billable_hours == 3
        assert detail.current_charge == 150.0
        assert detail.overdue is False

    def test_slot_detail_overdue(self, layout):
        allocate(layout, "ABC123", "CAR", now=T0)
        detail = slot_detail(layout, 1, floor_number=1, now=T0 + timedelta(days=2))
        assert detail.overdue is True

    def test_slot_detail_for_empty_slot_heals_cache(self, layout):
        slot = get_slot(layout, 1, 2)
        slot.occupied = True
        layout.commit()
        detail = slot_detail(layout, 2, floor_number=1)
        assert detail.occupied is False
        assert detail.current_charge == 0.0
        assert get_slot(layout, 1, 2).occupied is False
