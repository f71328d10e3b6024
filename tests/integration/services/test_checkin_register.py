"""
Integration tests for check-in records, the guest register and departure reports.
"""

from __future__ import annotations

from datetime import date, time
from decimal import Decimal
from typing import Any

import pytest
from sqlalchemy import func, select
from sqlalchemy.engine import Engine

from stay_sync.db.readers.checkins import (
    get_checkin_for_reservation,
    get_guest,
    get_guests_by_checkin,
)
from stay_sync.db.readers.checkouts import get_checkout
from stay_sync.db.readers.days import get_day
from stay_sync.db.readers.reservations import get_reservation
from stay_sync.db.writers.properties import delete_property, update_property
from stay_sync.models.checkins import Checkin, RegisteredGuest
from stay_sync.models.days import Season
from stay_sync.services.booking import (
    assign_price_range,
    cancel_reservation,
    complete_checkin,
    complete_checkout,
    create_reservation,
)
from stay_sync.services.guests import edit_guest, register_guest, remove_guest

PAYMENT = {
    "payment_method": "card",
    "payment_identifier": "4242",
    "payment_holder": "Ana Ruiz",
    "card_expiry": "08/27",
    "payment_date": date(2025, 5, 20),
    "rules_accepted": True,
    "gdpr_accepted": True,
}


def _traveller(fullname: str, **overrides: Any) -> dict[str, Any]:
    guest = {
        "fullname": fullname,
        "surname1": "Ruiz",
        "birth_date": date(1985, 3, 14),
        "nationality": "ESP",
        "document_type": "DNI",
        "document_number": f"{fullname.upper()}-001",
        "is_minor": False,
        "guardian_id": None,
    }
    guest.update(overrides)
    return guest


def _count(engine: Engine, model: Any) -> int:
    with engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(model)).scalar_one()


@pytest.fixture
def reservation_id(db_engine: Engine, property_id: int) -> int:
    """Ana's stay 2025-06-01..03 on a priced June."""
    assign_price_range(
        db_engine, property_id, date(2025, 6, 1), date(2025, 6, 10), Decimal("100"), Season.HIGH
    )
    return create_reservation(
        db_engine, property_id, {"guest_name": "Ana"}, date(2025, 6, 1), date(2025, 6, 3), 2, True
    )


@pytest.mark.integration
def test_complete_checkin_with_payment_stores_record(
    db_engine: Engine, reservation_id: int
) -> None:
    """Test that a finalized check-in keeps the payment and sets the flag."""
    assert complete_checkin(db_engine, reservation_id, PAYMENT)

    with db_engine.connect() as conn:
        checkin = get_checkin_for_reservation(conn, reservation_id)
        reservation = get_reservation(conn, reservation_id)

    assert checkin["payment_method"] == "card"
    assert checkin["payment_holder"] == "Ana Ruiz"
    assert checkin["payment_date"] == date(2025, 5, 20)
    assert checkin["rules_accepted"] is True
    assert checkin["finalized_at"] is not None
    assert reservation["has_checkin"] is True
    assert reservation["ops_synced"] is False


@pytest.mark.integration
@pytest.mark.parametrize("consent", ["rules_accepted", "gdpr_accepted"])
def test_complete_checkin_requires_both_consents(
    db_engine: Engine, reservation_id: int, consent: str
) -> None:
    """Test that a missing consent leaves no check-in record and no flag."""
    assert complete_checkin(db_engine, reservation_id, {**PAYMENT, consent: False}) is False

    with db_engine.connect() as conn:
        assert get_checkin_for_reservation(conn, reservation_id) is None
        assert get_reservation(conn, reservation_id)["has_checkin"] is False


@pytest.mark.integration
def test_complete_checkin_keeps_registered_guests(db_engine: Engine, reservation_id: int) -> None:
    """Test that finalizing reuses the record opened by the guest register."""
    register_guest(db_engine, reservation_id, _traveller("Ana"))

    assert complete_checkin(db_engine, reservation_id, PAYMENT)

    assert _count(db_engine, Checkin) == 1
    with db_engine.connect() as conn:
        checkin = get_checkin_for_reservation(conn, reservation_id)
        assert [g["fullname"] for g in get_guests_by_checkin(conn, checkin["id"])] == ["Ana"]


@pytest.mark.integration
def test_register_guest_opens_one_checkin(db_engine: Engine, reservation_id: int) -> None:
    """Test that all travellers of a stay share one check-in record."""
    ana = register_guest(db_engine, reservation_id, _traveller("Ana"))
    luis = register_guest(db_engine, reservation_id, _traveller("Luis", nationality="FRA"))

    assert ana is not None and luis is not None
    assert _count(db_engine, Checkin) == 1
    with db_engine.connect() as conn:
        assert get_guest(conn, ana)["checkin_id"] == get_guest(conn, luis)["checkin_id"]


@pytest.mark.integration
def test_register_guest_unknown_reservation(db_engine: Engine) -> None:
    assert register_guest(db_engine, 999, _traveller("Ana")) is None
    assert _count(db_engine, Checkin) == 0


@pytest.mark.integration
def test_register_minor_with_guardian(db_engine: Engine, reservation_id: int) -> None:
    """Test that a minor can name an adult of the same stay as guardian."""
    ana = register_guest(db_engine, reservation_id, _traveller("Ana"))
    leo = register_guest(
        db_engine,
        reservation_id,
        _traveller("Leo", birth_date=date(2015, 7, 1), is_minor=True, guardian_id=ana),
    )

    with db_engine.connect() as conn:
        assert get_guest(conn, leo)["guardian_id"] == ana


@pytest.mark.integration
def test_guardian_ignored_for_adults(db_engine: Engine, reservation_id: int) -> None:
    ana = register_guest(db_engine, reservation_id, _traveller("Ana"))
    luis = register_guest(db_engine, reservation_id, _traveller("Luis", guardian_id=ana))

    with db_engine.connect() as conn:
        assert get_guest(conn, luis)["guardian_id"] is None


@pytest.mark.integration
def test_register_minor_rejects_invalid_guardian(
    db_engine: Engine, property_id: int, reservation_id: int
) -> None:
    """Test that guardians must be adults registered in the same stay."""
    leo = register_guest(
        db_engine, reservation_id, _traveller("Leo", birth_date=date(2015, 7, 1), is_minor=True)
    )
    other_stay = create_reservation(
        db_engine, property_id, {"guest_name": "Luis"}, date(2025, 6, 5), date(2025, 6, 7), 1, False
    )
    luis = register_guest(db_engine, other_stay, _traveller("Luis"))

    minor_guardian = _traveller("Mia", is_minor=True, guardian_id=leo)
    foreign_guardian = _traveller("Mia", is_minor=True, guardian_id=luis)
    assert register_guest(db_engine, reservation_id, minor_guardian) is None
    assert register_guest(db_engine, reservation_id, foreign_guardian) is None
    assert _count(db_engine, RegisteredGuest) == 2


@pytest.mark.integration
def test_list_guests_adults_only(db_engine: Engine, reservation_id: int) -> None:
    ana = register_guest(db_engine, reservation_id, _traveller("Ana"))
    register_guest(
        db_engine, reservation_id, _traveller("Leo", is_minor=True, guardian_id=ana)
    )

    with db_engine.connect() as conn:
        checkin_id = get_checkin_for_reservation(conn, reservation_id)["id"]
        everyone = get_guests_by_checkin(conn, checkin_id)
        adults = get_guests_by_checkin(conn, checkin_id, adults_only=True)

    assert [g["fullname"] for g in everyone] == ["Ana", "Leo"]
    assert [g["fullname"] for g in adults] == ["Ana"]


@pytest.mark.integration
def test_edit_guest_rewrites_register_fields(db_engine: Engine, reservation_id: int) -> None:
    ana = register_guest(db_engine, reservation_id, _traveller("Ana"))

    assert edit_guest(db_engine, ana, _traveller("Ana", surname2="Gil", city="Sevilla"))
    assert edit_guest(db_engine, 999, _traveller("Nadie")) is False

    with db_engine.connect() as conn:
        guest = get_guest(conn, ana)
    assert guest["surname2"] == "Gil"
    assert guest["city"] == "Sevilla"


@pytest.mark.integration
def test_guardian_turned_minor_releases_dependants(
    db_engine: Engine, reservation_id: int
) -> None:
    """Test that a guest recorded as a minor stops being anyone's guardian."""
    ana = register_guest(db_engine, reservation_id, _traveller("Ana"))
    leo = register_guest(
        db_engine, reservation_id, _traveller("Leo", is_minor=True, guardian_id=ana)
    )

    assert edit_guest(db_engine, ana, _traveller("Ana", is_minor=True))

    with db_engine.connect() as conn:
        assert get_guest(conn, leo)["guardian_id"] is None


@pytest.mark.integration
def test_remove_guardian_releases_dependants(db_engine: Engine, reservation_id: int) -> None:
    """Test that deleting a guardian keeps the minor without a guardian."""
    ana = register_guest(db_engine, reservation_id, _traveller("Ana"))
    leo = register_guest(
        db_engine, reservation_id, _traveller("Leo", is_minor=True, guardian_id=ana)
    )

    assert remove_guest(db_engine, ana)
    assert remove_guest(db_engine, ana) is False

    with db_engine.connect() as conn:
        assert get_guest(conn, ana) is None
        assert get_guest(conn, leo)["guardian_id"] is None


@pytest.mark.integration
def test_checkout_report_drops_description_without_damage(
    db_engine: Engine, reservation_id: int
) -> None:
    report = {
        "exit_time": time(11, 30),
        "keys_returned": True,
        "damage_detected": False,
        "damage_description": "scratch on the table",
    }

    assert complete_checkout(db_engine, reservation_id, report)

    with db_engine.connect() as conn:
        checkout = get_checkout(conn, reservation_id)
        assert get_reservation(conn, reservation_id)["has_checkout"] is True
    assert checkout["exit_time"] == time(11, 30)
    assert checkout["damage_description"] is None


@pytest.mark.integration
def test_checkout_report_replaces_previous(db_engine: Engine, reservation_id: int) -> None:
    """Test that a second departure report overwrites the first."""
    complete_checkout(db_engine, reservation_id, {"keys_returned": True})
    complete_checkout(
        db_engine,
        reservation_id,
        {"keys_returned": False, "damage_detected": True, "damage_description": "broken lamp"},
    )

    with db_engine.connect() as conn:
        checkout = get_checkout(conn, reservation_id)
    assert checkout["keys_returned"] is False
    assert checkout["damage_detected"] is True
    assert checkout["damage_description"] == "broken lamp"


@pytest.mark.integration
def test_checkout_report_unknown_reservation(db_engine: Engine) -> None:
    assert complete_checkout(db_engine, 999, {"keys_returned": True}) is False


@pytest.mark.integration
def test_cancel_reservation_removes_checkin_records(
    db_engine: Engine, reservation_id: int
) -> None:
    """Test that cancelling a stay deletes its check-in, guests and report."""
    register_guest(db_engine, reservation_id, _traveller("Ana"))
    complete_checkin(db_engine, reservation_id, PAYMENT)
    complete_checkout(db_engine, reservation_id, {"keys_returned": True})

    assert cancel_reservation(db_engine, reservation_id)

    assert _count(db_engine, Checkin) == 0
    assert _count(db_engine, RegisteredGuest) == 0
    with db_engine.connect() as conn:
        assert get_checkout(conn, reservation_id) is None


@pytest.mark.integration
def test_update_property(db_engine: Engine, property_id: int) -> None:
    assert update_property(db_engine, property_id, "  Casa Roja ", "https://roja.test")
    assert update_property(db_engine, 999, "Casa Nadie") is False
    with pytest.raises(ValueError):
        update_property(db_engine, property_id, "   ")


@pytest.mark.integration
def test_delete_property_removes_its_ledger(
    db_engine: Engine, property_id: int, reservation_id: int
) -> None:
    """Test that deleting a property takes days, stays and guests with it."""
    register_guest(db_engine, reservation_id, _traveller("Ana"))

    assert delete_property(db_engine, property_id)
    assert delete_property(db_engine, property_id) is False

    with db_engine.connect() as conn:
        assert get_reservation(conn, reservation_id) is None
        assert get_day(conn, property_id, date(2025, 6, 1)) is None
    assert _count(db_engine, RegisteredGuest) == 0
