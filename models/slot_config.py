from datetime import datetime
from models.db import db

DEFAULT_TENANT = "default"


class SlotConfig(db.Model):
    __tablename__ = "slot_configs"

    # normalized clinic email, or "default" for the global record
    tenant = db.Column(db.String(255), primary_key=True)
    slots_per_hour = db.Column(db.Integer, nullable=False, default=1)

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {"tenant": self.tenant, "slotsPerHour": self.slots_per_hour}
