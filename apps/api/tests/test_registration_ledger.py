from __future__ import annotations

import json
import uuid

import pytest
from sqlalchemy import func, select

from app.models import Registration
from app.models.prayer import PrayerStatus
from app.models.registration import RegistrationStatus
from app.services import prayers_service, registration_service
from app.services.exceptions import (
    CapacityExceededError,
    DuplicateDeviceError,
    InactiveRegistrationError,
    InvalidInputError,
    NotFoundError,
    RegistrationClosedError,
)


def _registration_count(db, prayer_id) -> int:
    return int(
        db.scalar(
            select(func.count()).select_from(Registration).where(Registration.prayer_id == prayer_id)
        )
    )


def test_admit_creates_confirmed_registration_with_payload(db_session, make_prayer):
    prayer_id = make_prayer(capacity=10)

    reg = registration_service.admit(db_session, prayer_id, 3, "device-a", lang="de")

    assert reg.status == RegistrationStatus.CONFIRMED
    assert reg.people == 3
    assert reg.lang == "de"
    payload = json.loads(reg.qr_payload)
    assert payload == {
        "pid": str(prayer_id),
        "date": reg.created_at.date().isoformat(),
        "ppl": 3,
    }
    assert prayers_service.get_prayer(db_session, prayer_id).remaining == 7


def test_admit_unknown_prayer_is_not_found(db_session):
    with pytest.raises(NotFoundError) as exc_info:
        registration_service.admit(db_session, uuid.uuid4(), 1, "device-a")
    assert exc_info.value.code == "PRAYER_NOT_FOUND"


def test_whole_capacity_scenario(db_session, make_prayer, large_parties):
    prayer_id = make_prayer(capacity=150)

    with pytest.raises(CapacityExceededError):
        registration_service.admit(db_session, prayer_id, 151, "device-a")
    assert _registration_count(db_session, prayer_id) == 0

    registration_service.admit(db_session, prayer_id, 150, "device-a")

    summary = prayers_service.get_prayer(db_session, prayer_id)
    assert summary.remaining == 0
    assert summary.status == PrayerStatus.FULL


def test_full_prayer_rejects_additional_party(db_session, make_prayer):
    prayer_id = make_prayer(capacity=3)
    registration_service.admit(db_session, prayer_id, 3, "device-a")

    with pytest.raises(CapacityExceededError):
        registration_service.admit(db_session, prayer_id, 1, "device-b")
    assert _registration_count(db_session, prayer_id) == 1


def test_same_device_cannot_register_twice(db_session, make_prayer):
    prayer_id = make_prayer(capacity=20)
    registration_service.admit(db_session, prayer_id, 1, "device-a")

    with pytest.raises(DuplicateDeviceError) as exc_info:
        registration_service.admit(db_session, prayer_id, 2, "device-a")
    assert exc_info.value.code == "DEVICE_ALREADY_REGISTERED"
    assert _registration_count(db_session, prayer_id) == 1


def test_same_device_may_register_for_another_prayer(db_session, make_prayer):
    first = make_prayer(capacity=5)
    second = make_prayer(capacity=5, title="Second slot")

    registration_service.admit(db_session, first, 1, "device-a")
    registration_service.admit(db_session, second, 1, "device-a")

    assert _registration_count(db_session, first) == 1
    assert _registration_count(db_session, second) == 1


def test_cancelled_row_does_not_block_device(db_session, make_prayer):
    prayer_id = make_prayer(capacity=5)
    reg = registration_service.admit(db_session, prayer_id, 2, "device-a")
    reg.status = RegistrationStatus.CANCELLED
    db_session.commit()

    again = registration_service.admit(db_session, prayer_id, 5, "device-a")

    assert again.id != reg.id
    assert registration_service.confirmed_total(db_session, prayer_id) == 5


def test_closed_prayer_rejects_admission(db_session, make_prayer):
    prayer_id = make_prayer(active=False, auto_activation=False)

    with pytest.raises(RegistrationClosedError):
        registration_service.admit(db_session, prayer_id, 1, "device-a")
    assert _registration_count(db_session, prayer_id) == 0


@pytest.mark.parametrize("people", [0, 6, -1, True, "2"])
def test_admit_rejects_invalid_party_size(db_session, make_prayer, people):
    prayer_id = make_prayer()

    with pytest.raises(InvalidInputError):
        registration_service.admit(db_session, prayer_id, people, "device-a")


def test_admit_requires_device_key(db_session, make_prayer):
    prayer_id = make_prayer()

    with pytest.raises(InvalidInputError):
        registration_service.admit(db_session, prayer_id, 1, "   ")


def test_amend_within_capacity(db_session, make_prayer):
    prayer_id = make_prayer(capacity=5)
    reg = registration_service.admit(db_session, prayer_id, 2, "device-a")
    original_date = json.loads(reg.qr_payload)["date"]

    updated = registration_service.amend(db_session, reg.id, 5)

    assert updated.people == 5
    payload = json.loads(updated.qr_payload)
    assert payload["ppl"] == 5
    assert payload["date"] == original_date
    assert payload["pid"] == str(prayer_id)


def test_amend_over_capacity_leaves_party_unchanged(db_session, make_prayer):
    prayer_id = make_prayer(capacity=6)
    reg = registration_service.admit(db_session, prayer_id, 2, "device-a")
    registration_service.admit(db_session, prayer_id, 3, "device-b")

    with pytest.raises(CapacityExceededError):
        registration_service.amend(db_session, reg.id, 4)

    stored = db_session.get(Registration, reg.id)
    assert stored.people == 2
    assert json.loads(stored.qr_payload)["ppl"] == 2


def test_amend_cancelled_registration_is_inactive(db_session, make_prayer):
    prayer_id = make_prayer(capacity=5)
    reg = registration_service.admit(db_session, prayer_id, 2, "device-a")
    reg.status = RegistrationStatus.CANCELLED
    db_session.commit()

    with pytest.raises(InactiveRegistrationError):
        registration_service.amend(db_session, reg.id, 1)


def test_amend_unknown_registration_is_not_found(db_session):
    with pytest.raises(NotFoundError) as exc_info:
        registration_service.amend(db_session, uuid.uuid4(), 1)
    assert exc_info.value.code == "REGISTRATION_NOT_FOUND"


def test_cancel_frees_seats_and_device(db_session, make_prayer):
    prayer_id = make_prayer(capacity=3)
    reg = registration_service.admit(db_session, prayer_id, 3, "device-a")

    registration_service.cancel(db_session, reg.id)

    assert db_session.get(Registration, reg.id) is None
    registration_service.admit(db_session, prayer_id, 3, "device-a")


def test_cancel_unknown_registration_is_not_found(db_session):
    with pytest.raises(NotFoundError):
        registration_service.cancel(db_session, uuid.uuid4())


def test_list_registrations_only_confirmed_in_creation_order(db_session, make_prayer):
    prayer_id = make_prayer(capacity=20)
    first = registration_service.admit(db_session, prayer_id, 1, "device-a")
    second = registration_service.admit(db_session, prayer_id, 2, "device-b")
    dropped = registration_service.admit(db_session, prayer_id, 3, "device-c")
    dropped.status = RegistrationStatus.CANCELLED
    db_session.commit()

    listed = registration_service.list_registrations(db_session, prayer_id)

    assert [r.id for r in listed] == [first.id, second.id]
