"""
Admin dashboard, overrides and audit trail.
The admin identity is supplied upstream in the X-Admin-User header and trusted as-is.
"""

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional
from app.database import get_db
from app.schemas.admin import (
    AuditLogOut, ChangeSlotRequest, CorrectPlateRequest, DashboardStatsOut, ForceExitRequest, SlotDetailOut,
)
from app.schemas.catalog import SlotOut
from app.schemas.parking import ParkingRecordOut
from app.services import dashboard_service, ledger_service, override_service
from app.services.audit_service import list_audit_logs

router = APIRouter()


def require_actor(x_admin_user: Optional[str] = Header(default=None)) -> str:
    if not x_admin_user or not x_admin_user.strip():
        raise HTTPException(status_code=401, detail="Missing X-Admin-User header")
    return x_admin_user.strip()


@router.get("/admin/dashboard/stats", response_model=DashboardStatsOut)
def get_dashboard_stats(db: Session = Depends(get_db)):
    return dashboard_service.dashboard_stats(db)


@router.get("/admin/slots/{slot_number}", response_model=SlotDetailOut, summary="Slot detail + live charge")
def get_slot_detail(slot_number: int, floor_number: Optional[int] = None, db: Session = Depends(get_db)):
    return dashboard_service.slot_detail(db, slot_number, floor_number)


@router.get("/admin/slots/{slot_number}/history", response_model=list[ParkingRecordOut])
def get_slot_history(slot_number: int, floor_number: Optional[int] = None, limit: int = 20,
                     db: Session = Depends(get_db)):
    return ledger_service.slot_history(db, slot_number, floor_number, limit)


@router.get("/admin/history", response_model=list[ParkingRecordOut], summary="Closed parking records")
def get_history(start_date: Optional[datetime] = None, end_date: Optional[datetime] = None,
                vehicle_type: Optional[str] = None, slot_number: Optional[int] = None,
                plate: Optional[str] = None, db: Session = Depends(get_db)):
    return ledger_service.vehicle_history(db, start_date, end_date, vehicle_type, slot_number, plate)


@router.get("/admin/records/{record_id}", response_model=ParkingRecordOut, summary="Entry / exit slip")
def get_record(record_id: int, db: Session = Depends(get_db)):
    return ledger_service.get_entry(db, record_id)


# ── Overrides ─────────────────────────────────────────────────────────────────

@router.post("/admin/override/force-exit", response_model=ParkingRecordOut)
def force_exit(body: ForceExitRequest, actor: str = Depends(require_actor), db: Session = Depends(get_db)):
    return override_service.force_exit(db, body.slot_number, actor, floor_number=body.floor_number)


@router.post("/admin/slots/{slot_number}/mark-available", response_model=SlotOut)
def mark_available(slot_number: int, floor_number: Optional[int] = None,
                   actor: str = Depends(require_actor), db: Session = Depends(get_db)):
    return override_service.mark_available(db, slot_number, actor, floor_number=floor_number)


@router.post("/admin/override/change-slot", response_model=ParkingRecordOut)
def change_slot(body: ChangeSlotRequest, actor: str = Depends(require_actor), db: Session = Depends(get_db)):
    return override_service.change_slot(db, body.slot_number, body.new_slot_number, actor,
                                        floor_number=body.floor_number)


@router.post("/admin/override/update-license", response_model=ParkingRecordOut)
def update_license(body: CorrectPlateRequest, actor: str = Depends(require_actor),
                   db: Session = Depends(get_db)):
    return override_service.correct_plate(db, body.slot_number, body.new_license_plate, actor,
                                          floor_number=body.floor_number)


@router.get("/admin/audit-logs", response_model=list[AuditLogOut], summary="Audit trail, newest first")
def get_audit_logs(admin_username: Optional[str] = None, action: Optional[str] = None,
                   start_date: Optional[datetime] = None, end_date: Optional[datetime] = None,
                   limit: int = 100, db: Session = Depends(get_db)):
    return list_audit_logs(db, admin_username, start_date, end_date, action, limit)
