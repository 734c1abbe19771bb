# Overview: Read-only projections of MOF progress, history and status counts.

from __future__ import annotations

from dataclasses import dataclass, field

from ..models import Item, Mof
from .repositories import Repositories, default_repositories
from .status_resolver import MOF_STATUSES


@dataclass(frozen=True)
class MofProgress:
    mof: Mof
    quantity_requested: int
    quantity_picked: int
    quantity_verified: int
    items_picked: list[Item] = field(default_factory=list)
    items_verified: list[Item] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "mof": self.mof.to_dict(),
            "quantity_requested": self.quantity_requested,
            "quantity_picked": self.quantity_picked,
            "quantity_verified": self.quantity_verified,
            "items_picked": [i.to_dict() for i in self.items_picked],
            "items_verified": [i.to_dict() for i in self.items_verified],
        }


def get_mof_progress(mof_id: int, *, repos: Repositories | None = None) -> MofProgress | None:
    """
    Current pick/verify progress of a MOF.

    Item lists keep storage order. Returns None when the MOF does not exist.
    """
    repos = repos or default_repositories()

    mof = repos.mofs.get(mof_id)
    if mof is None:
        return None

    items = repos.items.list_by_mof(mof.id)
    items_picked = [i for i in items if i.picked_by_picker]
    items_verified = [i for i in items if i.verified_by_requester]

    return MofProgress(
        mof=mof,
        quantity_requested=mof.quantity_requested,
        quantity_picked=len(items_picked),
        quantity_verified=len(items_verified),
        items_picked=items_picked,
        items_verified=items_verified,
    )


def get_mof_history(mof_id: int, *, repos: Repositories | None = None) -> dict | None:
    """Pick and verification audit records for a MOF, oldest first."""
    repos = repos or default_repositories()

    mof = repos.mofs.get(mof_id)
    if mof is None:
        return None

    return {
        "mof": mof.to_dict(),
        "picks": [r.to_dict() for r in repos.pick_records.list_by_mof(mof.id)],
        "verifications": [r.to_dict() for r in repos.verification_records.list_by_mof(mof.id)],
    }


def get_status_summary(*, repos: Repositories | None = None) -> dict[str, int]:
    """MOF counts per status; every status is present, zero when unused."""
    repos = repos or default_repositories()

    counts = repos.mofs.count_by_status()
    return {status: counts.get(status, 0) for status in MOF_STATUSES}
