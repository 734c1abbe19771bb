# Overview: Domain error taxonomy raised by the MOF workflow services.

"""
Every failure a caller can see from the scan, verification and lifecycle
services is one of these. Each carries a stable ``kind`` string that the
routes echo back next to the human-readable message, so clients can branch
on the kind without parsing text.

None of these are retried by the services. They are all raised before any
row is mutated.
"""

from __future__ import annotations


class MofTrackError(Exception):
    """Base class for domain errors."""

    kind = "error"
    http_status = 400

    def to_dict(self) -> dict:
        return {"error": str(self), "kind": self.kind}


class NotFoundError(MofTrackError):
    """Referenced MOF, item or user does not exist."""

    kind = "not_found"
    http_status = 404

    _LABELS = {"mof": "MOF", "item": "Item", "user": "User"}

    def __init__(self, entity: str, key, *, by: str = "id"):
        self.entity = entity
        self.key = key
        label = self._LABELS.get(entity, entity)
        super().__init__(f"{label} with {by} {key} not found")


class ConflictError(MofTrackError):
    """A unique field collides with an existing record."""

    kind = "conflict"
    http_status = 409

    def __init__(self, field: str, value):
        self.field = field
        self.value = value
        super().__init__(f"{field} '{value}' already exists")


class PartNumberMismatchError(MofTrackError):
    kind = "part_number_mismatch"
    http_status = 422

    def __init__(self, item_part_number: str, mof_part_number: str):
        self.item_part_number = item_part_number
        self.mof_part_number = mof_part_number
        super().__init__(
            f"Item part number {item_part_number} does not match MOF part number {mof_part_number}"
        )


class OwnershipError(MofTrackError):
    """Verified item is bound to a different MOF (or to none)."""

    kind = "ownership"
    http_status = 409

    def __init__(self, item_serial: str, mof_serial: str):
        self.item_serial = item_serial
        self.mof_serial = mof_serial
        super().__init__(f"Item {item_serial} does not belong to MOF {mof_serial}")


class NotYetPickedError(MofTrackError):
    kind = "not_yet_picked"
    http_status = 409

    def __init__(self, item_serial: str):
        self.item_serial = item_serial
        super().__init__(f"Item {item_serial} has not been picked yet")


class AlreadyProcessedError(MofTrackError):
    """Duplicate scan (action='pick') or duplicate verification (action='verify')."""

    kind = "already_processed"
    http_status = 409

    def __init__(self, action: str, item_serial: str):
        self.action = action
        self.item_serial = item_serial
        verb = "picked" if action == "pick" else "verified"
        super().__init__(f"Item {item_serial} has already been {verb}")
