"""Users, password resets, the catalog and the sample data loader."""

from datetime import timedelta

import pytest

from oceanview import seed
from oceanview.core.config import settings
from oceanview.schemas.catalog import AmenityCreate, CruiseSearch
from oceanview.schemas.enums import UserRole
from oceanview.schemas.user import UserUpdate
from oceanview.storage.errors import ConflictError

from factories import cabin_type_create, cruise_create, destination_create, user_create


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


def test_create_user(storage, clock):
    user = storage.create_user(user_create(username="ann", first_name="Ann"))

    assert user.id is not None
    assert user.role == UserRole.customer
    assert user.created_at == clock.now
    assert user.is_verified is False
    assert storage.get_user(user.id) == user
    assert storage.get_user_by_username("ann").id == user.id
    assert storage.get_user_by_email("ann@example.com").id == user.id


def test_unknown_users_are_none(storage):
    assert storage.get_user(999) is None
    assert storage.get_user_by_username("nobody") is None
    assert storage.get_user_by_email("nobody@example.com") is None
    assert storage.update_user(999, UserUpdate(city="Lima")) is None
    assert storage.update_user_password(999, "x") is None
    assert storage.update_user_last_login(999) is None


def test_duplicate_username_is_rejected(storage):
    storage.create_user(user_create(username="ann"))

    with pytest.raises(ConflictError):
        storage.create_user(user_create(username="ann", email="other@example.com"))


def test_duplicate_email_is_rejected(storage):
    storage.create_user(user_create(username="ann", email="shared@example.com"))

    with pytest.raises(ConflictError):
        storage.create_user(user_create(username="ben", email="shared@example.com"))

    assert storage.get_user_by_username("ben") is None


def test_update_applies_only_sent_fields(storage, clock):
    user = storage.create_user(user_create(first_name="Ann", last_name="Lee"))
    clock.advance(minutes=1)

    updated = storage.update_user(user.id, UserUpdate(city="Lisbon"))

    assert updated.city == "Lisbon"
    assert updated.first_name == "Ann"
    assert updated.last_name == "Lee"
    assert updated.updated_at == clock.now
    assert storage.get_user(user.id).city == "Lisbon"


def test_update_to_taken_email_is_rejected(storage):
    ann = storage.create_user(user_create(username="ann"))
    storage.create_user(user_create(username="ben"))

    with pytest.raises(ConflictError):
        storage.update_user(ann.id, UserUpdate(email="ben@example.com"))

    assert storage.get_user(ann.id).email == "ann@example.com"


def test_last_login_is_stamped(storage, clock):
    user = storage.create_user(user_create())
    clock.advance(hours=3)

    assert storage.update_user_last_login(user.id).last_login == clock.now


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------


def test_reset_token_flow(storage):
    user = storage.create_user(user_create(username="ann"))

    token = storage.create_password_reset_token("ann@example.com")

    assert token
    assert storage.get_user(user.id).reset_token == token
    assert storage.reset_password(token, "new-hash") is True
    changed = storage.get_user(user.id)
    assert changed.password_hash == "new-hash"
    assert changed.reset_token is None
    assert changed.reset_token_expiry is None
    # single use
    assert storage.reset_password(token, "another-hash") is False


def test_reset_token_for_unknown_email(storage):
    assert storage.create_password_reset_token("nobody@example.com") is None


def test_reset_token_expires(storage, clock):
    user = storage.create_user(user_create(username="ann"))
    token = storage.create_password_reset_token("ann@example.com", ttl=timedelta(minutes=30))

    clock.advance(minutes=30)

    assert storage.reset_password(token, "new-hash") is False
    assert storage.get_user(user.id).password_hash == "not-a-real-hash"


@pytest.mark.parametrize("token", ["", "not-a-token"])
def test_reset_with_bad_token(storage, token):
    storage.create_user(user_create())

    assert storage.reset_password(token, "new-hash") is False


def test_password_change_clears_reset_token(storage):
    user = storage.create_user(user_create(username="ann"))
    token = storage.create_password_reset_token("ann@example.com")

    storage.update_user_password(user.id, "changed-hash")

    assert storage.reset_password(token, "new-hash") is False
    assert storage.get_user(user.id).password_hash == "changed-hash"


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture
def catalog(storage):
    caribbean = storage.create_destination(destination_create(name="Caribbean"))
    alaska = storage.create_destination(destination_create(name="Alaska"))
    cruises = {
        "short": storage.create_cruise(cruise_create(caribbean.id, title="Weekend Escape", duration=4)),
        "week": storage.create_cruise(cruise_create(caribbean.id, title="Caribbean Paradise", duration=7)),
        "long": storage.create_cruise(cruise_create(alaska.id, title="Glacier Voyage", duration=12)),
    }
    return {"caribbean": caribbean, "alaska": alaska, **cruises}


def test_destination_and_cruise_lookup(storage, catalog):
    assert [d.name for d in storage.get_destinations()] == ["Caribbean", "Alaska"]
    assert storage.get_destination(catalog["alaska"].id).name == "Alaska"
    assert len(storage.get_cruises()) == 3
    assert storage.get_cruise(catalog["long"].id).title == "Glacier Voyage"
    assert storage.get_destination(999) is None
    assert storage.get_cruise(999) is None


def test_cruises_by_destination(storage, catalog):
    found = storage.get_cruises_by_destination(catalog["caribbean"].id)

    assert [c.id for c in found] == [catalog["short"].id, catalog["week"].id]


def test_cruise_lists_survive_storage(storage, catalog):
    cruise = storage.get_cruise(catalog["week"].id)

    assert cruise.available_packages == ["Premium Dining Package"]
    assert cruise.available_dates is None


@pytest.mark.parametrize(
    "params, expected",
    [
        ({}, ["short", "week", "long"]),
        ({"destination": "Any Destination"}, ["short", "week", "long"]),
        ({"destination": "Caribbean"}, ["short", "week"]),
        ({"destination": "Atlantis"}, []),
        ({"duration": "2-5 Days"}, ["short"]),
        ({"duration": "6-9 Days"}, ["week"]),
        ({"duration": "10+ Days"}, ["long"]),
        ({"duration": "Any Length"}, ["short", "week", "long"]),
        ({"destination": "Alaska", "duration": "2-5 Days"}, []),
        ({"destination": "Caribbean", "duration": "6-9 Days", "travelers": "2 Adults"}, ["week"]),
    ],
)
def test_search_cruises(storage, catalog, params, expected):
    found = storage.search_cruises(CruiseSearch(**params))

    assert [c.id for c in found] == [catalog[key].id for key in expected]


def test_cabin_types(storage, catalog):
    week = catalog["week"]
    balcony = storage.create_cabin_type(cabin_type_create(week.id))
    suite = storage.create_cabin_type(cabin_type_create(week.id, name="Suite", capacity=4, amenities=None))
    storage.create_cabin_type(cabin_type_create(catalog["long"].id))

    assert [c.id for c in storage.get_cabin_types(week.id)] == [balcony.id, suite.id]
    assert storage.get_cabin_type(balcony.id).amenities == ["Balcony", "Mini bar"]
    assert storage.get_cabin_type(suite.id).amenities is None
    assert storage.get_cabin_types(999) == []


def test_amenities(storage):
    spa = storage.create_amenity(AmenityCreate(name="Spa", description="Relax", image_url="https://img/spa.jpg"))

    assert storage.get_amenity(spa.id) == spa
    assert storage.get_amenities() == [spa]


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------


def test_seed_catalog_is_idempotent(storage):
    assert seed.seed_catalog(storage) is True
    assert seed.seed_catalog(storage) is False

    assert len(storage.get_destinations()) == len(seed.DESTINATIONS)
    assert len(storage.get_cruises()) == len(seed.CRUISES)
    assert len(storage.get_amenities()) == len(seed.AMENITIES)
    assert len(storage.get_testimonials()) == len(seed.TESTIMONIALS)
    caribbean = storage.search_cruises(CruiseSearch(destination="Caribbean"))
    assert [c.title for c in caribbean] == ["Caribbean Paradise"]


def test_seed_run_adds_demo_staff_outside_production(storage, monkeypatch):
    monkeypatch.setattr(settings, "ENV", "local")

    seed.run(storage)
    seed.run(storage)

    assert storage.get_user_by_username("admin").role == UserRole.admin
    assert storage.get_user_by_username("staff").role == UserRole.staff
    assert len(storage.get_destinations()) == len(seed.DESTINATIONS)


def test_seed_run_skips_demo_staff_in_production(storage, monkeypatch):
    monkeypatch.setattr(settings, "ENV", "production")

    seed.run(storage)

    assert storage.get_user_by_username("admin") is None
