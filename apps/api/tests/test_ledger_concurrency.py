from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

from app.db import SessionLocal
from app.services import registration_service
from app.services.exceptions import CapacityExceededError, DuplicateDeviceError, ServiceError


def _race(workers: int, attempt) -> list[str]:
    barrier = threading.Barrier(workers)

    def _run(i: int) -> str:
        db = SessionLocal()
        try:
            barrier.wait()
            attempt(db, i)
            return "ok"
        except ServiceError as err:
            return err.code
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(_run, range(workers)))


def test_concurrent_admissions_never_overbook(make_prayer):
    prayer_id = make_prayer(capacity=10)

    results = _race(
        8,
        lambda db, i: registration_service.admit(db, prayer_id, 2, f"device-{i}"),
    )

    assert results.count("ok") == 5
    assert results.count(CapacityExceededError().code) == 3
    with SessionLocal() as db:
        assert registration_service.confirmed_total(db, prayer_id) == 10


def test_concurrent_admissions_from_one_device_admit_once(make_prayer):
    prayer_id = make_prayer(capacity=50)

    results = _race(
        6,
        lambda db, i: registration_service.admit(db, prayer_id, 1, "shared-device"),
    )

    assert results.count("ok") == 1
    assert results.count(DuplicateDeviceError().code) == 5
    with SessionLocal() as db:
        assert len(registration_service.list_registrations(db, prayer_id)) == 1


def test_concurrent_amendments_respect_capacity(make_prayer):
    prayer_id = make_prayer(capacity=8)
    with SessionLocal() as db:
        ids = [registration_service.admit(db, prayer_id, 1, f"device-{i}").id for i in range(4)]

    # Each amendment alone fits; all of them together would need 20 seats
    results = _race(4, lambda db, i: registration_service.amend(db, ids[i], 5))

    assert results.count("ok") == 1
    with SessionLocal() as db:
        assert registration_service.confirmed_total(db, prayer_id) <= 8
