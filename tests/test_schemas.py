from datetime import date

import pytest
from jose import JWTError, jwt
from pydantic import ValidationError

from oceanview.core.config import DEV_SECRET_KEY, Settings, settings
from oceanview.core.security import (
    ALGO, REFRESH, create_access_token, hash_password, issue_token_pair, user_id_from_token, verify_password,
)
from oceanview.schemas.booking import BookingDetails
from oceanview.schemas.payments import CheckoutPaymentIn


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def test_postgres_url_is_normalized():
    s = Settings(DATABASE_URL="postgres://u:p@db:5432/oceanview")

    assert s.DATABASE_URL == "postgresql+psycopg2://u:p@db:5432/oceanview"


def test_storage_backend_is_checked():
    assert Settings(STORAGE_BACKEND=" SQL ").STORAGE_BACKEND == "sql"
    with pytest.raises(ValidationError):
        Settings(STORAGE_BACKEND="redis")


def test_production_requires_real_secret():
    with pytest.raises(ValidationError):
        Settings(ENV="production", SECRET_KEY=DEV_SECRET_KEY)

    assert Settings(ENV="production", SECRET_KEY="s3cret").ENV == "production"


# ---------------------------------------------------------------------------
# Security
# ---------------------------------------------------------------------------


def test_password_hash_round_trip():
    hashed = hash_password("sunny-deck-42")

    assert hashed != "sunny-deck-42"
    assert verify_password("sunny-deck-42", hashed)
    assert not verify_password("wrong", hashed)


def test_token_types_are_not_interchangeable():
    pair = issue_token_pair(7)

    assert user_id_from_token(pair.access_token) == 7
    assert user_id_from_token(pair.refresh_token, REFRESH) == 7
    with pytest.raises(JWTError):
        user_id_from_token(pair.refresh_token)
    with pytest.raises(JWTError):
        user_id_from_token(pair.access_token, REFRESH)


def test_expired_and_forged_tokens_are_rejected(monkeypatch):
    monkeypatch.setattr(settings, "ACCESS_TOKEN_EXPIRE_MINUTES", -1)
    with pytest.raises(JWTError):
        user_id_from_token(create_access_token(7))

    monkeypatch.setattr(settings, "ACCESS_TOKEN_EXPIRE_MINUTES", 30)
    forged = jwt.encode({"sub": "7", "type": "access"}, "not-the-secret", algorithm=ALGO)
    with pytest.raises(JWTError):
        user_id_from_token(forged)


# ---------------------------------------------------------------------------
# Checkout form
# ---------------------------------------------------------------------------


def test_card_form_is_masked():
    form = CheckoutPaymentIn(
        card_number="4111 1111 1111 1234", card_name="Ann Lee", expiry_date="09/28", cvv="321",
        billing_address="1 Harbour Rd", city="Miami", zip_code="33101", country="US",
    )

    data = form.to_stripe_data()

    assert data.card_last4 == "1234"
    assert (data.expiry_month, data.expiry_year) == ("09", "28")
    assert data.billing_address == {"address": "1 Harbour Rd", "city": "Miami", "zipCode": "33101", "country": "US"}
    assert "4111111111111234" not in data.model_dump_json()
    assert "321" not in data.model_dump_json()


@pytest.mark.parametrize(
    "field, value",
    [("card_number", "4111"), ("expiry_date", "2028-09"), ("cvv", "12"), ("city", "")],
)
def test_card_form_rejects_bad_fields(field, value):
    fields = dict(
        card_number="4111111111111234", card_name="Ann Lee", expiry_date="09/28", cvv="321",
        billing_address="1 Harbour Rd", city="Miami", zip_code="33101", country="US",
    )
    fields[field] = value

    with pytest.raises(ValidationError):
        CheckoutPaymentIn(**fields)


# ---------------------------------------------------------------------------
# Booking form
# ---------------------------------------------------------------------------


def test_booking_dates_must_be_ordered():
    with pytest.raises(ValidationError):
        BookingDetails(
            cruise_id=1, departure_date=date(2025, 7, 8), return_date=date(2025, 7, 1),
            total_price=899, number_of_guests=1, cabin_type="Interior",
        )


def test_booking_form_reads_camel_case_and_writes_it():
    details = BookingDetails.model_validate({
        "cruiseId": 1, "departureDate": "2025-07-01", "returnDate": "2025-07-08",
        "totalPrice": 899, "numberOfGuests": 1, "cabinType": "Interior",
    })

    assert details.cruise_id == 1
    assert details.model_dump(by_alias=True)["numberOfGuests"] == 1
