from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class Transfer(db.Model):
    """
    Inventory transfer between two locations.

    LIFECYCLE:
    1. pending: Transfer created with its item lines
    2. in_transit: Dispatched from the source location
    3. received: Received at destination, shortages/damages recorded

    WHY: items are a JSON snapshot of product code/name/unit taken at creation
    time, so catalog edits never rewrite history. shortages/damages are written
    once, by the receive transition.

    status only changes through TransferRepository.transition(), which
    conditions the UPDATE on the previously observed status.
    """
    __tablename__ = "transfers"
    __table_args__ = (
        db.Index("ix_transfers_status", "status"),
        db.Index("ix_transfers_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    FIELD_COLUMNS = {
        "fromLocationId": "from_location_id",
        "toLocationId": "to_location_id",
        "driverName": "driver_name",
        "vehicleReg": "vehicle_reg",
        "status": "status",
        "items": "items",
        "shortages": "shortages",
        "damages": "damages",
        "createdBy": "created_by",
        "dispatchedBy": "dispatched_by",
        "dispatchedAt": "dispatched_at",
        "receivedBy": "received_by",
        "receivedAt": "received_at",
    }

    pk = db.Column(db.Integer, primary_key=True)
    # TRF-<epoch millis>-<suffix>, assigned by the store
    id = db.Column(db.String(40), nullable=False, unique=True)

    # Location references are not foreign keys: deleted locations leave raw ids
    from_location_id = db.Column(db.String(36), nullable=False, index=True)
    to_location_id = db.Column(db.String(36), nullable=False, index=True)

    driver_name = db.Column(db.String(255), nullable=False)
    vehicle_reg = db.Column(db.String(64), nullable=False)

    # pending, in_transit, received
    status = db.Column(db.String(16), nullable=False, default="pending")

    items = db.Column(db.JSON, nullable=False)
    shortages = db.Column(db.JSON, nullable=True)
    damages = db.Column(db.JSON, nullable=True)

    # User attribution for accountability
    created_by = db.Column(db.String(36), nullable=False)
    dispatched_by = db.Column(db.String(36), nullable=True)
    received_by = db.Column(db.String(36), nullable=True)

    # Timestamps for each lifecycle stage
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    dispatched_at = db.Column(db.DateTime, nullable=True)
    received_at = db.Column(db.DateTime, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "fromLocationId": self.from_location_id,
            "toLocationId": self.to_location_id,
            "driverName": self.driver_name,
            "vehicleReg": self.vehicle_reg,
            "status": self.status,
            "items": list(self.items or []),
            "shortages": list(self.shortages) if self.shortages is not None else None,
            "damages": list(self.damages) if self.damages is not None else None,
            "createdBy": self.created_by,
            "dispatchedBy": self.dispatched_by,
            "receivedBy": self.received_by,
            "createdAt": to_utc_z(self.created_at),
            "dispatchedAt": to_utc_z(self.dispatched_at),
            "receivedAt": to_utc_z(self.received_at),
        }
