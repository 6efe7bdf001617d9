# Overview: Domain error taxonomy shared by the store, services, and routes.

"""
Error taxonomy for stock control.

Each class maps to one client-facing outcome at the HTTP boundary:
- ValidationError        -> 400 (missing/malformed input)
- NotFoundError          -> 404 (unknown transfer/user/product/location id)
- PermissionDeniedError  -> 403 (capability not granted)
- ConflictError          -> 409 (duplicate business key)
- InvalidTransitionError -> 409 (lifecycle step not allowed from current status)

NotificationError never reaches a client: the event bus logs and absorbs it.
"""


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate product code)."""


class NotFoundError(LookupError):
    """Raised when a referenced record does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class InvalidTransitionError(Exception):
    """Raised when a lifecycle operation is attempted from the wrong status."""

    def __init__(self, transfer_id: str, action: str, current_status: str):
        self.transfer_id = transfer_id
        self.action = action
        self.current_status = current_status
        super().__init__(
            f"Cannot {action} transfer {transfer_id}: transfer is {current_status.replace('_', ' ')}"
        )


class PermissionDeniedError(Exception):
    """Raised when user lacks required capability."""


class NotificationError(Exception):
    """Raised when a notification cannot be composed or delivered."""
