# Overview: Pure MOF status transition rules shared by the scan and verification services.

"""
MOF Status Resolver

================================================================================
STATE MACHINE (ordered, forward only under scans and verifications):
    Pending -> In Progress -> MOF siap Supply -> Completed
================================================================================

RULES (each event only applies its own rules):

EVENT_PICK (after a scan):
1. picked_count == quantity_requested            -> MOF siap Supply
2. 0 < picked_count < quantity_requested,
   and the MOF is still Pending                  -> In Progress
3. anything else                                 -> unchanged

EVENT_VERIFY (after a verification):
1. verified_count >= quantity_requested          -> Completed
2. anything else                                 -> unchanged

The resolved status is never ranked below the current one, and Completed is
terminal. Only lifecycle_service.update_mof_status can move a MOF backwards.

Over-picking (picked_count > quantity_requested) is not rejected anywhere;
it simply leaves the status where it is.
"""

from __future__ import annotations

from ..validation import ValidationError


MOF_STATUS_PENDING = "Pending"
MOF_STATUS_IN_PROGRESS = "In Progress"
MOF_STATUS_READY_FOR_SUPPLY = "MOF siap Supply"
MOF_STATUS_COMPLETED = "Completed"

# Order matters: index is the rank
MOF_STATUSES = (
    MOF_STATUS_PENDING,
    MOF_STATUS_IN_PROGRESS,
    MOF_STATUS_READY_FOR_SUPPLY,
    MOF_STATUS_COMPLETED,
)

EVENT_PICK = "pick"
EVENT_VERIFY = "verify"


def validate_status(status: str) -> None:
    if status not in MOF_STATUSES:
        raise ValidationError(
            f"Invalid status '{status}'. Must be one of: {', '.join(MOF_STATUSES)}"
        )


def status_rank(status: str) -> int:
    validate_status(status)
    return MOF_STATUSES.index(status)


def _pick_target(current_status: str, picked_count: int, quantity_requested: int) -> str | None:
    if picked_count == quantity_requested:
        return MOF_STATUS_READY_FOR_SUPPLY
    if 0 < picked_count < quantity_requested and current_status == MOF_STATUS_PENDING:
        return MOF_STATUS_IN_PROGRESS
    return None


def _verify_target(verified_count: int, quantity_requested: int) -> str | None:
    if verified_count >= quantity_requested:
        return MOF_STATUS_COMPLETED
    return None


def resolve_status(
    current_status: str,
    picked_count: int,
    verified_count: int,
    quantity_requested: int,
    *,
    event: str,
) -> str:
    """
    Compute the MOF status implied by its aggregate item counts.

    Args:
        current_status: Status stored on the MOF right now
        picked_count: Items bound to the MOF with picked_by_picker set
        verified_count: Items bound to the MOF with verified_by_requester set
        quantity_requested: The MOF's requested quantity (> 0)
        event: EVENT_PICK or EVENT_VERIFY; selects which rules apply

    Returns:
        The new status; equal to current_status when nothing changes.
    """
    validate_status(current_status)

    if event == EVENT_PICK:
        target = _pick_target(current_status, picked_count, quantity_requested)
    elif event == EVENT_VERIFY:
        target = _verify_target(verified_count, quantity_requested)
    else:
        raise ValueError(f"Unknown status event '{event}'")

    if current_status == MOF_STATUS_COMPLETED or target is None:
        return current_status

    if status_rank(target) <= status_rank(current_status):
        return current_status
    return target
