# Overview: Service-layer operations for picker scans; binds items to MOFs.

"""
Scan Engine

A picker scans one serialized item against one MOF. A successful scan:
- marks the item picked and binds it to the MOF (permanently)
- appends a PickRecord
- recomputes the MOF status (status_resolver.resolve_status)

PRECONDITIONS (checked in this order, each its own error):
1. MOF exists                        -> NotFoundError("mof")
2. Item exists                       -> NotFoundError("item")
3. Part numbers match                -> PartNumberMismatchError
4. Item not already picked           -> AlreadyProcessedError("pick")
5. Picker user exists                -> NotFoundError("user")

CONCURRENCY:
The item and the MOF are locked (in-process mutex + SELECT ... FOR UPDATE)
for the whole validate -> mutate -> record -> recompute sequence, and the
locks are held until commit. Two scans of the same item therefore cannot
both pass precondition 4, and two "last picks" on the same MOF see each
other's committed item rows when counting.
"""

from __future__ import annotations

from flask import current_app

from ..errors import NotFoundError, PartNumberMismatchError, AlreadyProcessedError
from ..models import Item, Mof, PickRecord
from moftrack.time_utils import utcnow
from .concurrency import entity_locks
from .repositories import Repositories, default_repositories
from .status_resolver import EVENT_PICK, resolve_status


def find_mof_and_item(
    repos: Repositories,
    mof_serial_number: str,
    item_serial_number: str,
) -> tuple[Mof, Item]:
    """Look up both sides of a scan/verify by serial number (preconditions 1 and 2)."""
    mof = repos.mofs.get_by_serial(mof_serial_number)
    if mof is None:
        raise NotFoundError("mof", mof_serial_number, by="serial number")

    item = repos.items.get_by_serial(item_serial_number)
    if item is None:
        raise NotFoundError("item", item_serial_number, by="serial number")

    return mof, item


def apply_status(repos: Repositories, mof: Mof, *, event: str, now) -> str:
    """
    Recompute and store the MOF status from current item counts.

    event selects the rule set: EVENT_PICK after a scan, EVENT_VERIFY after
    a verification.

    Caller must hold the MOF lock. Returns the (possibly unchanged) status.
    """
    repos.session.flush()
    picked = repos.items.count_picked(mof.id)
    verified = repos.items.count_verified(mof.id)

    new_status = resolve_status(mof.status, picked, verified, mof.quantity_requested, event=event)
    if new_status != mof.status:
        current_app.logger.info(
            "MOF %s status %s -> %s (picked %d, verified %d of %d)",
            mof.serial_number, mof.status, new_status, picked, verified, mof.quantity_requested,
        )
        mof.status = new_status
        mof.updated_at = now
    return new_status


def scan_item(
    mof_serial_number: str,
    item_serial_number: str,
    picked_by: int,
    *,
    repos: Repositories | None = None,
) -> Item:
    """
    Record a picker's scan of one item against one MOF.

    Args:
        mof_serial_number: Serial number of the MOF being picked
        item_serial_number: Serial number of the scanned item
        picked_by: User ID of the picker
        repos: Data access bundle (defaults to the Flask-SQLAlchemy session)

    Returns:
        The updated Item (picked_by_picker=True, mof_id set)

    Raises:
        NotFoundError, PartNumberMismatchError, AlreadyProcessedError
    """
    repos = repos or default_repositories()

    with repos.transaction():
        mof, item = find_mof_and_item(repos, mof_serial_number, item_serial_number)
        mof_id, item_id = mof.id, item.id

    with entity_locks(("item", item_id), ("mof", mof_id)):
        with repos.transaction():
            mof = repos.mofs.get_for_update(mof_id)
            item = repos.items.get_for_update(item_id)

            if item.part_number != mof.part_number:
                raise PartNumberMismatchError(item.part_number, mof.part_number)

            if item.picked_by_picker:
                raise AlreadyProcessedError("pick", item.serial_number)

            if repos.users.get(picked_by) is None:
                raise NotFoundError("user", picked_by)

            now = utcnow()
            item.picked_by_picker = True
            item.mof_id = mof.id
            item.picked_at = now

            repos.pick_records.add(
                PickRecord(mof_id=mof.id, item_id=item.id, picked_by=picked_by, picked_at=now)
            )

            apply_status(repos, mof, event=EVENT_PICK, now=now)

            current_app.logger.info(
                "Item %s picked for MOF %s by user %s",
                item.serial_number, mof.serial_number, picked_by,
            )

    return item
