# Overview: Read-only transfer summaries for the dashboard and reports pages.

from __future__ import annotations

from .transfer_service import (
    TRANSFER_STATUS_IN_TRANSIT,
    TRANSFER_STATUS_PENDING,
    TRANSFER_STATUS_RECEIVED,
)


DEFAULT_RECENT_LIMIT = 5


def transfer_summary(store, *, recent_limit: int = DEFAULT_RECENT_LIMIT) -> dict:
    """
    Status counts, total units moved, and the most recent transfers.

    Recent transfers are newest first by createdAt.
    """
    transfers = store.transfers.get_all()

    counts = {
        TRANSFER_STATUS_PENDING: 0,
        TRANSFER_STATUS_IN_TRANSIT: 0,
        TRANSFER_STATUS_RECEIVED: 0,
    }
    total_items = 0
    total_short = 0
    total_damaged = 0
    for transfer in transfers:
        counts[transfer["status"]] = counts.get(transfer["status"], 0) + 1
        total_items += sum(item["quantity"] for item in transfer["items"])
        total_short += sum(s["quantityShort"] for s in transfer.get("shortages") or [])
        total_damaged += sum(d["quantityDamaged"] for d in transfer.get("damages") or [])

    recent = sorted(transfers, key=lambda t: t["createdAt"], reverse=True)[:recent_limit]

    return {
        "total": len(transfers),
        "pending": counts[TRANSFER_STATUS_PENDING],
        "inTransit": counts[TRANSFER_STATUS_IN_TRANSIT],
        "received": counts[TRANSFER_STATUS_RECEIVED],
        "totalItems": total_items,
        "totalShort": total_short,
        "totalDamaged": total_damaged,
        "recentTransfers": recent,
    }
