"""
Concurrency tests against a file-backed SQLite database.

Each worker thread pushes its own app context and therefore gets its own
SQLAlchemy session and connection, like concurrent requests would.
"""
import threading
from datetime import datetime

import pytest

from moftrack import create_app
from moftrack.errors import AlreadyProcessedError
from moftrack.extensions import db
from moftrack.models import Item, Mof, PickRecord, VerificationRecord
from moftrack.services import concurrency, lifecycle_service, scan_service, verification_service
from moftrack.services.concurrency import entity_locks


@pytest.fixture
def file_app(tmp_path):
    db_path = tmp_path / "concurrency.db"
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
        "SQLALCHEMY_ENGINE_OPTIONS": {"connect_args": {"timeout": 30}},
    })

    with app.app_context():
        db.drop_all()
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def seeded(file_app):
    with file_app.app_context():
        admin = lifecycle_service.create_user("admin", "admin@c.test", "Admin", "Admin")
        picker = lifecycle_service.create_user("picker", "picker@c.test", "Picker", "Picking")
        requester = lifecycle_service.create_user("requester", "req@c.test", "Req", "Requester")
        mof = lifecycle_service.create_mof(
            "P1", 4, datetime(2026, 11, 1), "Rina", "Assembly", "Line 3", admin.id,
        )
        for n in range(4):
            lifecycle_service.create_item("P1", "Acme", f"SN-{n}")

        return {
            "picker": picker.id,
            "requester": requester.id,
            "mof_id": mof.id,
            "mof_serial": mof.serial_number,
        }


def _run_concurrently(app, jobs):
    """Run each job in its own thread and app context; return results/exceptions in order."""
    results = [None] * len(jobs)
    barrier = threading.Barrier(len(jobs))

    def worker(index, job):
        with app.app_context():
            barrier.wait()
            try:
                results[index] = job()
            except Exception as exc:
                results[index] = exc
            finally:
                db.session.remove()

    threads = [threading.Thread(target=worker, args=(i, job)) for i, job in enumerate(jobs)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    return results


def test_same_item_scanned_concurrently_wins_once(file_app, seeded):
    jobs = [
        lambda: scan_service.scan_item(seeded["mof_serial"], "SN-0", seeded["picker"]).id
        for _ in range(8)
    ]

    results = _run_concurrently(file_app, jobs)

    successes = [r for r in results if isinstance(r, int)]
    rejections = [r for r in results if isinstance(r, AlreadyProcessedError)]
    assert len(successes) == 1
    assert len(rejections) == 7

    with file_app.app_context():
        assert db.session.query(PickRecord).count() == 1
        item = db.session.query(Item).filter_by(serial_number="SN-0").one()
        assert item.picked_by_picker is True
        assert db.session.get(Mof, seeded["mof_id"]).status == "In Progress"


def test_last_picks_on_same_mof_reach_ready(file_app, seeded):
    jobs = [
        (lambda sn=f"SN-{n}": scan_service.scan_item(seeded["mof_serial"], sn, seeded["picker"]).id)
        for n in range(4)
    ]

    results = _run_concurrently(file_app, jobs)

    assert all(isinstance(r, int) for r in results), results

    with file_app.app_context():
        assert db.session.query(PickRecord).count() == 4
        assert db.session.get(Mof, seeded["mof_id"]).status == "MOF siap Supply"


def test_concurrent_verifications_complete_once(file_app, seeded):
    with file_app.app_context():
        for n in range(4):
            scan_service.scan_item(seeded["mof_serial"], f"SN-{n}", seeded["picker"])

    jobs = [
        (lambda sn=f"SN-{n % 4}": verification_service.verify_item(
            seeded["mof_serial"], sn, seeded["requester"]).id)
        for n in range(8)
    ]

    results = _run_concurrently(file_app, jobs)

    assert sum(isinstance(r, int) for r in results) == 4
    assert sum(isinstance(r, AlreadyProcessedError) for r in results) == 4

    with file_app.app_context():
        assert db.session.query(VerificationRecord).count() == 4
        assert db.session.get(Mof, seeded["mof_id"]).status == "Completed"


def test_entity_locks_opposite_order_does_not_deadlock():
    done = []

    def worker(keys):
        for _ in range(200):
            with entity_locks(*keys):
                pass
        done.append(keys)

    a = threading.Thread(target=worker, args=((("item", 1), ("mof", 1)),))
    b = threading.Thread(target=worker, args=((("mof", 1), ("item", 1)),))
    a.start()
    b.start()
    a.join(timeout=10)
    b.join(timeout=10)

    assert len(done) == 2


def test_entity_lock_pool_stays_bounded_across_many_scans(make_mof, make_item, picker):
    stripes = concurrency._stripes
    mof = make_mof(quantity=50)
    for n in range(50):
        make_item(f"BULK-{n}")
        scan_service.scan_item(mof.serial_number, f"BULK-{n}", picker.id)

    for n in range(1000):
        with entity_locks(("item", n), ("mof", mof.id)):
            pass

    assert concurrency._stripes is stripes
    assert len(concurrency._stripes) == concurrency.LOCK_STRIPES
    assert not any(lock.locked() for lock in concurrency._stripes)


def test_keys_sharing_a_stripe_do_not_self_deadlock():
    first = ("item", 0)
    target = concurrency._stripe_index(first)
    second = next(
        ("mof", n) for n in range(1, 100000) if concurrency._stripe_index(("mof", n)) == target
    )

    with entity_locks(first, second):
        assert concurrency._stripes[target].locked()

    assert not concurrency._stripes[target].locked()
