# Smart Parking: Database Models
# Import all models here for SQLAlchemy discovery

from app.models.floor import Floor                     # noqa
from app.models.parking_slot import ParkingSlot        # noqa
from app.models.parking_record import ParkingRecord    # noqa
from app.models.rate_entry import RateEntry            # noqa
from app.models.audit_log import AuditLog              # noqa
