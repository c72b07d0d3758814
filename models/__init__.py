from .db import db
from .booking import Booking
from .slot_config import SlotConfig
from .audit_log import AuditLog
from .ip_rate_limit import IpRateLimit
