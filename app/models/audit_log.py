"""
Audit trail of administrative actions.
Append-only: rows are written by audit_service and never updated or deleted.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from app.database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    admin_username = Column(String(100), nullable=False, index=True)
    action = Column(String(50), nullable=False, index=True)
    description = Column(Text)
    details = Column(JSON)                       # structured payload to reconstruct the change
    timestamp = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog {self.id} {self.action} by={self.admin_username}>"
