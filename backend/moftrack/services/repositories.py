# Overview: Per-entity repositories over the SQLAlchemy session.

"""
Data access for the MOF workflow.

The scan, verification, progress and lifecycle services never touch
``db.session`` directly for entity reads and writes; they go through a
``Repositories`` bundle passed in by the caller (or the default one bound to
the Flask-SQLAlchemy session). Tests and tools can hand in a bundle bound to
a different session.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from sqlalchemy import func

from ..extensions import db
from ..models import User, Mof, Item, PickRecord, VerificationRecord
from .concurrency import lock_for_update


class _Repository:
    model = None

    def __init__(self, session):
        self.session = session

    def get(self, entity_id: int):
        return self.session.get(self.model, entity_id)

    def get_for_update(self, entity_id: int):
        """Re-read a row under SELECT ... FOR UPDATE, refreshing the identity map."""
        return (
            lock_for_update(self.session.query(self.model).filter_by(id=entity_id))
            .populate_existing()
            .first()
        )

    def add(self, entity):
        self.session.add(entity)
        self.session.flush()
        return entity


class UserRepository(_Repository):
    model = User

    def get_by_username(self, username: str) -> User | None:
        return self.session.query(User).filter_by(username=username).first()

    def get_by_email(self, email: str) -> User | None:
        return self.session.query(User).filter_by(email=email).first()

    def list_all(self) -> list[User]:
        return self.session.query(User).order_by(User.id).all()


class MofRepository(_Repository):
    model = Mof

    def get_by_serial(self, serial_number: str) -> Mof | None:
        return self.session.query(Mof).filter_by(serial_number=serial_number).first()

    def serial_exists(self, serial_number: str) -> bool:
        return self.session.query(Mof.id).filter_by(serial_number=serial_number).first() is not None

    def list_all(self) -> list[Mof]:
        # Newest first; id breaks ties between rows created in the same second
        return self.session.query(Mof).order_by(Mof.created_at.desc(), Mof.id.desc()).all()

    def list_by_creator(self, user_id: int) -> list[Mof]:
        return (
            self.session.query(Mof)
            .filter_by(created_by=user_id)
            .order_by(Mof.created_at.desc(), Mof.id.desc())
            .all()
        )

    def count_by_status(self) -> dict[str, int]:
        rows = self.session.query(Mof.status, func.count(Mof.id)).group_by(Mof.status).all()
        return {status: count for status, count in rows}


class ItemRepository(_Repository):
    model = Item

    def get_by_serial(self, serial_number: str) -> Item | None:
        return self.session.query(Item).filter_by(serial_number=serial_number).first()

    def list_all(self) -> list[Item]:
        return self.session.query(Item).order_by(Item.id).all()

    def list_by_mof(self, mof_id: int) -> list[Item]:
        return self.session.query(Item).filter_by(mof_id=mof_id).order_by(Item.id).all()

    def count_picked(self, mof_id: int) -> int:
        return (
            self.session.query(func.count(Item.id))
            .filter(Item.mof_id == mof_id, Item.picked_by_picker.is_(True))
            .scalar()
        )

    def count_verified(self, mof_id: int) -> int:
        return (
            self.session.query(func.count(Item.id))
            .filter(Item.mof_id == mof_id, Item.verified_by_requester.is_(True))
            .scalar()
        )


class PickRecordRepository(_Repository):
    model = PickRecord

    def list_by_mof(self, mof_id: int) -> list[PickRecord]:
        return (
            self.session.query(PickRecord)
            .filter_by(mof_id=mof_id)
            .order_by(PickRecord.picked_at, PickRecord.id)
            .all()
        )


class VerificationRecordRepository(_Repository):
    model = VerificationRecord

    def list_by_mof(self, mof_id: int) -> list[VerificationRecord]:
        return (
            self.session.query(VerificationRecord)
            .filter_by(mof_id=mof_id)
            .order_by(VerificationRecord.verified_at, VerificationRecord.id)
            .all()
        )


@dataclass
class Repositories:
    """One repository per entity, all bound to the same session."""

    session: object
    users: UserRepository
    mofs: MofRepository
    items: ItemRepository
    pick_records: PickRecordRepository
    verification_records: VerificationRecordRepository

    @classmethod
    def for_session(cls, session) -> "Repositories":
        return cls(
            session=session,
            users=UserRepository(session),
            mofs=MofRepository(session),
            items=ItemRepository(session),
            pick_records=PickRecordRepository(session),
            verification_records=VerificationRecordRepository(session),
        )

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Commit on success, roll back on any exception (domain or technical).

        Nothing written inside the block survives a failure, so a record
        can never exist without its item mutation or vice versa.
        """
        try:
            yield
            self.session.commit()
        except BaseException:
            self.session.rollback()
            raise


def default_repositories() -> Repositories:
    """Repositories bound to the Flask-SQLAlchemy scoped session."""
    return Repositories.for_session(db.session)
