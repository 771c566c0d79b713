"""
Shared audit trail writer.
Used by override_service, slot_service and rate_service. Entries are appended
inside the caller's transaction so the audit row commits with the change it
describes; nothing here commits on its own.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from app.models.audit_log import AuditLog
from app.utils.logger import get_logger

logger = get_logger(__name__)


def record_action(db: Session, actor: str, action: str, description: str,
                  details: Optional[dict] = None) -> AuditLog:
    entry = AuditLog(admin_username=actor, action=action, description=description,
                     details=details, timestamp=datetime.utcnow())
    db.add(entry)
    logger.info(f"[AUDIT][{action}] {actor}: {description}")
    return entry


def list_audit_logs(db: Session, actor: Optional[str] = None, start: Optional[datetime] = None,
                    end: Optional[datetime] = None, action: Optional[str] = None, limit: int = 100):
    """Audit entries newest first, filterable by actor, action and time range."""
    q = db.query(AuditLog)
    if actor:
        q = q.filter(AuditLog.admin_username == actor)
    if action:
        q = q.filter(AuditLog.action == action.upper())
    if start:
        q = q.filter(AuditLog.timestamp >= start)
    if end:
        q = q.filter(AuditLog.timestamp <= end)
    return q.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()
