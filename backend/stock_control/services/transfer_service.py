# backend/stock_control/services/transfer_service.py
"""
Inter-location transfer service.

WHY: Stock moves between warehouses and branches under a fixed, auditable
workflow. Every step records who did it and when, and the receiving side
reconciles what actually arrived.

LIFECYCLE:
1. PENDING: Transfer created with its item lines
2. IN_TRANSIT: Dispatched from the source location
3. RECEIVED: Received at destination, shortages/damages recorded

Forward only: no cancel, no skipping, no going back.

CONCURRENCY: Status is checked up front for a clear error, then again by the
store's conditional transition. Of two racing dispatches exactly one wins;
the loser sees InvalidTransitionError.
"""
from __future__ import annotations

import logging
from typing import Optional

from ..errors import InvalidTransitionError, NotFoundError, ValidationError
from ..models import Transfer
from ..time_utils import utcnow
from ..validation import require_column_text, strict_int
from .events import EventBus, TransferReceived


logger = logging.getLogger(__name__)


# Transfer status constants
TRANSFER_STATUS_PENDING = "pending"
TRANSFER_STATUS_IN_TRANSIT = "in_transit"
TRANSFER_STATUS_RECEIVED = "received"

TRANSFER_STATUSES = (
    TRANSFER_STATUS_PENDING,
    TRANSFER_STATUS_IN_TRANSIT,
    TRANSFER_STATUS_RECEIVED,
)


class TransferService:
    """Owns every status change; nothing else calls transfers.transition()."""

    def __init__(self, store, events: Optional[EventBus] = None):
        self.store = store
        self.events = events

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_transfer(self, transfer_id: str) -> dict:
        transfer = self.store.transfers.get(transfer_id)
        if transfer is None:
            raise NotFoundError("Transfer", transfer_id)
        return transfer

    def list_transfers(self, status: Optional[str] = None) -> list[dict]:
        """All transfers in store order, optionally filtered by status."""
        if status is not None and status not in TRANSFER_STATUSES:
            raise ValidationError(
                f"Invalid status: {status}. Must be one of {', '.join(TRANSFER_STATUSES)}"
            )
        transfers = self.store.transfers.get_all()
        if status is None:
            return transfers
        return [t for t in transfers if t["status"] == status]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_transfer(self, data: dict, user_id: str) -> dict:
        """
        Create a PENDING transfer.

        Item code/name/unit are snapshotted from the product when it exists,
        otherwise they must be supplied on the item. Nothing is persisted if
        any part of the payload is invalid.
        """
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")

        from_location_id = require_column_text(Transfer, data, "fromLocationId")
        to_location_id = require_column_text(Transfer, data, "toLocationId")
        driver_name = require_column_text(Transfer, data, "driverName")
        vehicle_reg = require_column_text(Transfer, data, "vehicleReg")

        if from_location_id == to_location_id:
            raise ValidationError("Cannot transfer to the same location")

        raw_items = data.get("items")
        if not isinstance(raw_items, list) or not raw_items:
            raise ValidationError("At least one item is required")

        items = [self._build_item(raw, index) for index, raw in enumerate(raw_items)]

        transfer = self.store.transfers.create({
            "fromLocationId": from_location_id,
            "toLocationId": to_location_id,
            "driverName": driver_name,
            "vehicleReg": vehicle_reg,
            "status": TRANSFER_STATUS_PENDING,
            "items": items,
            "createdBy": user_id,
        })
        logger.info("Transfer %s created by %s (%d items)", transfer["id"], user_id, len(items))
        return transfer

    def dispatch_transfer(self, transfer_id: str, user_id: str) -> dict:
        """PENDING -> IN_TRANSIT."""
        transfer = self.get_transfer(transfer_id)
        if transfer["status"] != TRANSFER_STATUS_PENDING:
            raise InvalidTransitionError(transfer_id, "dispatch", transfer["status"])

        updated = self.store.transfers.transition(
            transfer_id,
            TRANSFER_STATUS_PENDING,
            {
                "status": TRANSFER_STATUS_IN_TRANSIT,
                "dispatchedBy": user_id,
                "dispatchedAt": utcnow(),
            },
        )
        if updated is None:
            self._raise_lost_race(transfer_id, "dispatch")

        logger.info("Transfer %s dispatched by %s", transfer_id, user_id)
        return updated

    def receive_transfer(
        self,
        transfer_id: str,
        user_id: str,
        shortages: Optional[list] = None,
        damages: Optional[list] = None,
    ) -> dict:
        """
        IN_TRANSIT -> RECEIVED.

        Shortage/damage entries with a quantity of zero or less are dropped.
        Retained entries must reference a line on the transfer and may not
        exceed its quantity. TransferReceived is published after the
        transition commits.
        """
        transfer = self.get_transfer(transfer_id)
        if transfer["status"] != TRANSFER_STATUS_IN_TRANSIT:
            raise InvalidTransitionError(transfer_id, "receive", transfer["status"])

        lines = {item["productId"]: item for item in transfer["items"]}
        # running short + damaged total per product, shared by both lists
        claimed = {}
        clean_shortages = self._normalize_entries(shortages, "shortages", "quantityShort", lines, claimed)
        clean_damages = self._normalize_entries(damages, "damages", "quantityDamaged", lines, claimed)

        updated = self.store.transfers.transition(
            transfer_id,
            TRANSFER_STATUS_IN_TRANSIT,
            {
                "status": TRANSFER_STATUS_RECEIVED,
                "receivedBy": user_id,
                "receivedAt": utcnow(),
                "shortages": clean_shortages,
                "damages": clean_damages,
            },
        )
        if updated is None:
            self._raise_lost_race(transfer_id, "receive")

        logger.info(
            "Transfer %s received by %s (%d shortages, %d damages)",
            transfer_id, user_id, len(clean_shortages), len(clean_damages),
        )
        self._publish_received(updated)
        return updated

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _build_item(self, raw, index: int) -> dict:
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{index}] must be an object")

        product_id = raw.get("productId")
        if not isinstance(product_id, str) or not product_id.strip():
            raise ValidationError(f"items[{index}].productId is required")

        quantity = strict_int(raw.get("quantity"), f"items[{index}].quantity")
        if quantity < 1:
            raise ValidationError(f"items[{index}].quantity must be at least 1")

        product = self.store.products.get(product_id)
        if product is not None:
            code, name, unit = product["code"], product["name"], product["unit"]
        else:
            code, name, unit = raw.get("productCode"), raw.get("productName"), raw.get("unit")
            if not all(isinstance(v, str) and v.strip() for v in (code, name, unit)):
                raise ValidationError(
                    f"items[{index}]: unknown product {product_id} requires productCode, productName and unit"
                )

        return {
            "productId": product_id,
            "productCode": code,
            "productName": name,
            "quantity": quantity,
            "unit": unit,
        }

    def _normalize_entries(
        self, entries, label: str, quantity_field: str, lines: dict, claimed: dict
    ) -> list[dict]:
        if entries is None:
            return []
        if not isinstance(entries, list):
            raise ValidationError(f"{label} must be a list")

        kept = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise ValidationError(f"{label}[{index}] must be an object")
            quantity = strict_int(entry.get(quantity_field), f"{label}[{index}].{quantity_field}")
            if quantity <= 0:
                continue

            product_id = entry.get("productId")
            line = lines.get(product_id)
            if line is None:
                raise ValidationError(f"{label}[{index}]: product {product_id} is not on this transfer")
            total = claimed.get(product_id, 0) + quantity
            if total > line["quantity"]:
                raise ValidationError(
                    f"{label}[{index}]: short and damaged total {total} for product {product_id} "
                    f"exceeds transferred quantity {line['quantity']}"
                )
            claimed[product_id] = total

            clean = {
                "productId": product_id,
                "productCode": entry.get("productCode") or line["productCode"],
                "productName": entry.get("productName") or line["productName"],
                quantity_field: quantity,
            }
            if quantity_field == "quantityDamaged":
                reason = entry.get("reason")
                clean["reason"] = reason.strip() if isinstance(reason, str) else ""
            kept.append(clean)
        return kept

    def _raise_lost_race(self, transfer_id: str, action: str):
        current = self.store.transfers.get(transfer_id)
        if current is None:
            raise NotFoundError("Transfer", transfer_id)
        logger.warning("Transfer %s %s lost a concurrent update (now %s)", transfer_id, action, current["status"])
        raise InvalidTransitionError(transfer_id, action, current["status"])

    def _location_name(self, location_id: str) -> str:
        location = self.store.locations.get(location_id)
        return location["name"] if location else location_id

    def _publish_received(self, transfer: dict) -> None:
        if self.events is None:
            return
        try:
            settings = self.store.email_settings.get() or {}
            event = TransferReceived(
                transfer=transfer,
                from_location_name=self._location_name(transfer["fromLocationId"]),
                to_location_name=self._location_name(transfer["toLocationId"]),
                recipient_email=settings.get("recipientEmail"),
            )
            self.events.publish(event)
        except Exception:
            logger.exception("Failed to publish TransferReceived for %s", transfer["id"])
