from datetime import date, datetime

import pytest

from moftrack.errors import ConflictError, NotFoundError
from moftrack.extensions import db
from moftrack.models import Mof
from moftrack.services import lifecycle_service, serial_service
from moftrack.validation import ValidationError


class TestCreateUser:
    def test_create(self, db_session):
        user = lifecycle_service.create_user("dina", "dina@example.com", "Dina S", "Requester")

        assert user.id is not None
        assert user.to_dict()["role"] == "Requester"

    def test_duplicate_username(self, make_user):
        make_user("dina")

        with pytest.raises(ConflictError) as exc:
            lifecycle_service.create_user("dina", "other@example.com", "Other", "Picking")

        assert exc.value.field == "username"

    def test_duplicate_email(self, make_user):
        make_user("dina", email="shared@example.com")

        with pytest.raises(ConflictError) as exc:
            lifecycle_service.create_user("budi", "shared@example.com", "Budi", "Picking")

        assert exc.value.field == "email"

    def test_invalid_role(self, db_session):
        with pytest.raises(ValidationError):
            lifecycle_service.create_user("x", "x@example.com", "X", "Supervisor")


class TestCreateMof:
    def test_create_starts_pending_with_generated_serial(self, admin):
        mof = lifecycle_service.create_mof(
            "P1", 4, datetime(2026, 12, 1), "Rina", "Assembly", "Line 3", admin.id,
        )

        assert mof.status == "Pending"
        assert mof.serial_number.startswith("TEST-")
        assert mof.quantity_requested == 4
        assert mof.created_by == admin.id

    def test_accepts_plain_date(self, admin):
        mof = lifecycle_service.create_mof(
            "P1", 1, date(2026, 12, 1), "Rina", "Assembly", "Line 3", admin.id,
        )

        assert mof.expected_receiving_date == datetime(2026, 12, 1)

    def test_serials_are_unique(self, make_mof):
        serials = {make_mof().serial_number for _ in range(20)}
        assert len(serials) == 20

    def test_unknown_creator(self, db_session):
        with pytest.raises(NotFoundError) as exc:
            lifecycle_service.create_mof("P1", 1, datetime(2026, 12, 1), "R", "D", "P", 777)

        assert exc.value.entity == "user"
        assert db.session.query(Mof).count() == 0

    @pytest.mark.parametrize("qty", [0, -1, True, 1.5])
    def test_quantity_must_be_positive_int(self, admin, qty):
        with pytest.raises(ValidationError):
            lifecycle_service.create_mof("P1", qty, datetime(2026, 12, 1), "R", "D", "P", admin.id)

    def test_retries_on_serial_collision(self, admin, make_mof, monkeypatch):
        taken = make_mof().serial_number
        candidates = iter([taken, taken, "TEST-FRESH-000001"])
        monkeypatch.setattr(lifecycle_service, "generate_mof_serial", lambda: next(candidates))

        mof = lifecycle_service.create_mof(
            "P1", 1, datetime(2026, 12, 1), "R", "D", "P", admin.id,
        )

        assert mof.serial_number == "TEST-FRESH-000001"

    def test_gives_up_after_configured_attempts(self, app, admin, make_mof, monkeypatch):
        taken = make_mof().serial_number
        monkeypatch.setattr(lifecycle_service, "generate_mof_serial", lambda: taken)
        monkeypatch.setitem(app.config, "MOF_SERIAL_ATTEMPTS", 2)

        with pytest.raises(lifecycle_service.SerialCollisionError):
            lifecycle_service.create_mof("P1", 1, datetime(2026, 12, 1), "R", "D", "P", admin.id)


def test_serial_format(app):
    serial = serial_service.generate_mof_serial("MOF")
    prefix, stamp, suffix = serial.split("-")

    assert prefix == "MOF"
    assert len(stamp) == 14 and stamp.isdigit()
    assert len(suffix) == 6


class TestCreateItem:
    def test_create_is_unassigned(self, db_session):
        item = lifecycle_service.create_item("P1", "Acme", "SN-1")

        assert item.picked_by_picker is False
        assert item.verified_by_requester is False
        assert item.mof_id is None

    def test_duplicate_serial(self, make_item):
        make_item("SN-1")

        with pytest.raises(ConflictError) as exc:
            lifecycle_service.create_item("P9", "Other", "SN-1")

        assert exc.value.field == "serial_number"


class TestUpdateMofStatus:
    def test_override_forward_and_back(self, make_mof):
        mof = make_mof()

        assert lifecycle_service.update_mof_status(mof.id, "Completed").status == "Completed"
        assert lifecycle_service.update_mof_status(mof.id, "Pending").status == "Pending"

    def test_regression_logged_as_warning(self, make_mof, caplog):
        mof = make_mof()
        lifecycle_service.update_mof_status(mof.id, "Completed")

        with caplog.at_level("WARNING"):
            lifecycle_service.update_mof_status(mof.id, "In Progress")

        assert any("regressed" in r.getMessage() for r in caplog.records)

    def test_unknown_mof(self, db_session):
        with pytest.raises(NotFoundError):
            lifecycle_service.update_mof_status(404, "Completed")

    def test_unknown_status(self, make_mof):
        mof = make_mof()

        with pytest.raises(ValidationError):
            lifecycle_service.update_mof_status(mof.id, "Shipped")


class TestQueries:
    def test_get_by_serial(self, make_mof):
        mof = make_mof()

        assert lifecycle_service.get_mof_by_serial(mof.serial_number).id == mof.id
        assert lifecycle_service.get_mof_by_serial("MISSING") is None

    def test_all_mofs_newest_first(self, make_mof):
        ids = [make_mof().id for _ in range(3)]

        assert [m.id for m in lifecycle_service.get_all_mofs()] == list(reversed(ids))

    def test_user_mofs(self, make_user, make_mof):
        other = make_user("other", role="Admin")
        mine = [make_mof().id, make_mof().id]
        make_mof(created_by=other.id)

        creator_id = db.session.get(Mof, mine[0]).created_by
        result = lifecycle_service.get_user_mofs(creator_id)

        assert [m.id for m in result] == list(reversed(mine))
        assert lifecycle_service.get_user_mofs(9999) == []

    def test_all_items_and_users(self, make_item, picker, requester):
        make_item("A")
        make_item("B")

        assert [i.serial_number for i in lifecycle_service.get_all_items()] == ["A", "B"]
        assert [u.username for u in lifecycle_service.get_all_users()] == ["picker", "requester"]
