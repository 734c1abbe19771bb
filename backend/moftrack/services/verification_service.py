# Overview: Service-layer operations for requester verification of picked items.

"""
Verification Engine

The requester confirms receipt of an item a picker already scanned for
their MOF. Once enough items are verified the MOF is Completed.

PRECONDITIONS (in order):
1. MOF exists                        -> NotFoundError("mof")
2. Item exists                       -> NotFoundError("item")
3. Item is bound to this MOF         -> OwnershipError
4. Item has been picked              -> NotYetPickedError
5. Item not already verified         -> AlreadyProcessedError("verify")
6. Verifier user exists              -> NotFoundError("user")

Completion uses verified_count >= quantity_requested, so verifying more
items than requested is tolerated and still completes the MOF.
"""

from __future__ import annotations

from flask import current_app

from ..errors import NotFoundError, OwnershipError, NotYetPickedError, AlreadyProcessedError
from ..models import Item, VerificationRecord
from moftrack.time_utils import utcnow
from .concurrency import entity_locks
from .repositories import Repositories, default_repositories
from .scan_service import find_mof_and_item, apply_status
from .status_resolver import EVENT_VERIFY


def verify_item(
    mof_serial_number: str,
    item_serial_number: str,
    verified_by: int,
    *,
    repos: Repositories | None = None,
) -> Item:
    """
    Record a requester's verification of a previously picked item.

    Returns:
        The updated Item (verified_by_requester=True)

    Raises:
        NotFoundError, OwnershipError, NotYetPickedError, AlreadyProcessedError
    """
    repos = repos or default_repositories()

    with repos.transaction():
        mof, item = find_mof_and_item(repos, mof_serial_number, item_serial_number)
        mof_id, item_id = mof.id, item.id

    with entity_locks(("item", item_id), ("mof", mof_id)):
        with repos.transaction():
            mof = repos.mofs.get_for_update(mof_id)
            item = repos.items.get_for_update(item_id)

            if item.mof_id != mof.id:
                raise OwnershipError(item.serial_number, mof.serial_number)

            if not item.picked_by_picker:
                raise NotYetPickedError(item.serial_number)

            if item.verified_by_requester:
                raise AlreadyProcessedError("verify", item.serial_number)

            if repos.users.get(verified_by) is None:
                raise NotFoundError("user", verified_by)

            now = utcnow()
            item.verified_by_requester = True
            item.verified_at = now

            repos.verification_records.add(
                VerificationRecord(mof_id=mof.id, item_id=item.id, verified_by=verified_by, verified_at=now)
            )

            apply_status(repos, mof, event=EVENT_VERIFY, now=now)

            current_app.logger.info(
                "Item %s verified for MOF %s by user %s",
                item.serial_number, mof.serial_number, verified_by,
            )

    return item
