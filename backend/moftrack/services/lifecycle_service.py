# Overview: Service-layer operations for creating users, MOFs and items, and MOF queries.

"""
MOF Lifecycle Service

================================================================================
PURPOSE: Establish the initial state the scan and verification services
work on, plus the administrative status override and list queries.
================================================================================

CREATION RULES:
- Users: username and email are globally unique (ConflictError otherwise)
- MOFs: serial number is generated here, status always starts Pending,
  created_by must reference an existing user
- Items: serial number is caller supplied and unique; items start unassigned
  with both scan flags false

STATUS OVERRIDE:
update_mof_status() is an unconditional administrative escape hatch. It
does not consult the status order, so it can move a MOF backwards (e.g.
Completed -> Pending). Regressions are logged at WARNING so they show up
in the audit trail of the application log.
================================================================================
"""

from __future__ import annotations

from datetime import date, datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import ConflictError, NotFoundError
from ..models import Item, Mof, User
from ..validation import ValidationError
from moftrack.time_utils import utcnow
from .concurrency import entity_locks, run_with_retry
from .repositories import Repositories, default_repositories
from .serial_service import generate_mof_serial
from .status_resolver import MOF_STATUS_PENDING, status_rank, validate_status


ROLE_ADMIN = "Admin"
ROLE_PICKING = "Picking"
ROLE_REQUESTER = "Requester"

VALID_ROLES = (ROLE_ADMIN, ROLE_PICKING, ROLE_REQUESTER)


class SerialCollisionError(Exception):
    """Generated MOF serial already taken; create_mof retries on this."""


def create_user(
    username: str,
    email: str,
    full_name: str,
    role: str,
    *,
    repos: Repositories | None = None,
) -> User:
    """
    Create a user.

    Raises:
        ValidationError: If role is not Admin, Picking or Requester
        ConflictError: If username or email is already taken
    """
    repos = repos or default_repositories()

    if role not in VALID_ROLES:
        raise ValidationError(f"Invalid role '{role}'. Must be one of: {', '.join(VALID_ROLES)}")

    with repos.transaction():
        if repos.users.get_by_username(username) is not None:
            raise ConflictError("username", username)
        if repos.users.get_by_email(email) is not None:
            raise ConflictError("email", email)

        user = User(username=username, email=email, full_name=full_name, role=role)
        try:
            repos.users.add(user)
        except IntegrityError as exc:
            # Lost a race with a concurrent create; report which field collided
            field = "email" if "email" in str(exc.orig).lower() else "username"
            raise ConflictError(field, email if field == "email" else username) from exc

    current_app.logger.info("Created user %s (%s)", username, role)
    return user


def create_mof(
    part_number: str,
    quantity_requested: int,
    expected_receiving_date: datetime | date,
    requester_name: str,
    department: str,
    project: str,
    created_by: int,
    *,
    repos: Repositories | None = None,
) -> Mof:
    """
    Create a MOF in Pending status with a freshly generated serial number.

    Raises:
        ValidationError: If quantity_requested is not a positive integer
        NotFoundError: If created_by does not reference an existing user
    """
    repos = repos or default_repositories()

    if isinstance(quantity_requested, bool) or not isinstance(quantity_requested, int) or quantity_requested <= 0:
        raise ValidationError("quantity_requested must be a positive integer")

    if not isinstance(expected_receiving_date, datetime):
        expected_receiving_date = datetime(
            expected_receiving_date.year, expected_receiving_date.month, expected_receiving_date.day
        )

    def _op() -> Mof:
        with repos.transaction():
            if repos.users.get(created_by) is None:
                raise NotFoundError("user", created_by)

            serial_number = generate_mof_serial()
            if repos.mofs.serial_exists(serial_number):
                raise SerialCollisionError(f"MOF serial {serial_number} already in use")

            now = utcnow()
            mof = Mof(
                serial_number=serial_number,
                part_number=part_number,
                quantity_requested=quantity_requested,
                expected_receiving_date=expected_receiving_date,
                requester_name=requester_name,
                department=department,
                project=project,
                status=MOF_STATUS_PENDING,
                created_by=created_by,
                created_at=now,
                updated_at=now,
            )
            repos.mofs.add(mof)
            return mof

    mof = run_with_retry(
        _op,
        attempts=current_app.config.get("MOF_SERIAL_ATTEMPTS", 5),
        backoff_base=0.0,
        retry_on=(SerialCollisionError, IntegrityError),
    )
    current_app.logger.info(
        "Created MOF %s for %d x %s", mof.serial_number, quantity_requested, part_number
    )
    return mof


def create_item(
    part_number: str,
    supplier: str,
    serial_number: str,
    *,
    repos: Repositories | None = None,
) -> Item:
    """
    Register a physical serialized item, unassigned and unscanned.

    Raises:
        ConflictError: If serial_number already exists
    """
    repos = repos or default_repositories()

    with repos.transaction():
        if repos.items.get_by_serial(serial_number) is not None:
            raise ConflictError("serial_number", serial_number)

        item = Item(
            part_number=part_number,
            supplier=supplier,
            serial_number=serial_number,
            picked_by_picker=False,
            verified_by_requester=False,
            mof_id=None,
            picked_at=None,
            verified_at=None,
        )
        try:
            repos.items.add(item)
        except IntegrityError as exc:
            raise ConflictError("serial_number", serial_number) from exc

    return item


def update_mof_status(mof_id: int, status: str, *, repos: Repositories | None = None) -> Mof:
    """
    Set a MOF's status unconditionally (administrative override).

    Raises:
        ValidationError: If status is not a known MOF status
        NotFoundError: If the MOF does not exist
    """
    repos = repos or default_repositories()
    validate_status(status)

    with entity_locks(("mof", mof_id)):
        with repos.transaction():
            mof = repos.mofs.get_for_update(mof_id)
            if mof is None:
                raise NotFoundError("mof", mof_id)

            previous = mof.status
            mof.status = status
            mof.updated_at = utcnow()

    if status_rank(status) < status_rank(previous):
        current_app.logger.warning(
            "MOF %s status manually regressed %s -> %s", mof.serial_number, previous, status
        )
    else:
        current_app.logger.info("MOF %s status set %s -> %s", mof.serial_number, previous, status)
    return mof


def get_mof_by_serial(serial_number: str, *, repos: Repositories | None = None) -> Mof | None:
    repos = repos or default_repositories()
    return repos.mofs.get_by_serial(serial_number)


def get_all_mofs(*, repos: Repositories | None = None) -> list[Mof]:
    """All MOFs, newest created first."""
    repos = repos or default_repositories()
    return repos.mofs.list_all()


def get_user_mofs(user_id: int, *, repos: Repositories | None = None) -> list[Mof]:
    """MOFs created by one user, newest first. Unknown users simply have none."""
    repos = repos or default_repositories()
    return repos.mofs.list_by_creator(user_id)


def get_all_items(*, repos: Repositories | None = None) -> list[Item]:
    repos = repos or default_repositories()
    return repos.items.list_all()


def get_all_users(*, repos: Repositories | None = None) -> list[User]:
    repos = repos or default_repositories()
    return repos.users.list_all()
