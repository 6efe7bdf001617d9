from __future__ import annotations

import uuid

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


def new_record_id() -> str:
    return str(uuid.uuid4())


class Product(db.Model):
    """
    Product master data.

    CODE DESIGN DECISION:
    Product.code is the business key shown on transfer lines. Uniqueness is
    checked by catalog_service before writes, not by a table constraint, so
    every store backend behaves the same way.

    Transfer lines copy code/name/unit at creation time; editing a product
    never rewrites historical transfers.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_code", "code"),
        {"sqlite_autoincrement": True},
    )

    # Wire field -> column attribute
    FIELD_COLUMNS = {
        "code": "code",
        "name": "name",
        "category": "category",
        "unit": "unit",
    }

    # Surrogate key keeps insertion order; "id" is the public identity
    pk = db.Column(db.Integer, primary_key=True)
    id = db.Column(db.String(36), nullable=False, unique=True, default=new_record_id)

    code = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(120), nullable=False)
    unit = db.Column(db.String(32), nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "category": self.category,
            "unit": self.unit,
            "createdAt": to_utc_z(self.created_at),
        }


class Location(db.Model):
    """Warehouse or branch that transfers leave from and arrive at."""
    __tablename__ = "locations"
    __table_args__ = (
        db.Index("ix_locations_name", "name"),
        {"sqlite_autoincrement": True},
    )

    FIELD_COLUMNS = {
        "name": "name",
        "address": "address",
    }

    pk = db.Column(db.Integer, primary_key=True)
    id = db.Column(db.String(36), nullable=False, unique=True, default=new_record_id)

    name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "createdAt": to_utc_z(self.created_at),
        }
