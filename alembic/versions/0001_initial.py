"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _id():
    return sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True)


def _ts(name, nullable=False):
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("username", sa.String(length=80), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=120), nullable=True),
        sa.Column("last_name", sa.String(length=120), nullable=True),
        sa.Column("phone", sa.String(length=40), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=120), nullable=True),
        sa.Column("state", sa.String(length=120), nullable=True),
        sa.Column("zip_code", sa.String(length=20), nullable=True),
        sa.Column("country", sa.String(length=80), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="customer"),
        _ts("created_at"),
        _ts("updated_at"),
        _ts("last_login", nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("reset_token", sa.String(length=64), nullable=True),
        _ts("reset_token_expiry", nullable=True),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"], unique=False)
    op.create_index("ix_users_reset_token", "users", ["reset_token"], unique=False)

    op.create_table(
        "destinations",
        _id(),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("image_url", sa.String(length=512), nullable=False),
        sa.Column("price_from", sa.Integer(), nullable=False),
        sa.Column("rating", sa.Float(), nullable=False),
        sa.Column("cruise_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("duration_range", sa.String(length=40), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_destinations_name", "destinations", ["name"], unique=False)

    op.create_table(
        "cruises",
        _id(),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("destination_id", sa.Integer(), nullable=False),
        sa.Column("image_url", sa.String(length=512), nullable=False),
        sa.Column("departure_from", sa.String(length=120), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("price_per_person", sa.Integer(), nullable=False),
        sa.Column("original_price", sa.Integer(), nullable=True),
        sa.Column("cabin_type", sa.String(length=80), nullable=False),
        sa.Column("inclusions", sa.Text(), nullable=False),
        sa.Column("is_best_seller", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_new_itinerary", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("rating", sa.Float(), nullable=False),
        sa.Column("available_packages", sa.JSON(), nullable=False),
        sa.Column("available_dates", sa.JSON(), nullable=True),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_cruises_destination_id", "cruises", ["destination_id"], unique=False)

    op.create_table(
        "cabin_types",
        _id(),
        sa.Column("cruise_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=80), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("price_modifier", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("amenities", sa.JSON(), nullable=True),
        sa.Column("image_url", sa.String(length=512), nullable=True),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_cabin_types_cruise_id", "cabin_types", ["cruise_id"], unique=False)

    op.create_table(
        "amenities",
        _id(),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("image_url", sa.String(length=512), nullable=False),
        sa.Column("category", sa.String(length=60), nullable=True),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "bookings",
        _id(),
        sa.Column("booking_reference", sa.String(length=40), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("cruise_id", sa.Integer(), nullable=False),
        sa.Column("cabin_type_id", sa.Integer(), nullable=True),
        sa.Column("cabin_type", sa.String(length=80), nullable=False),
        _ts("booking_date"),
        sa.Column("departure_date", sa.Date(), nullable=False),
        sa.Column("return_date", sa.Date(), nullable=False),
        sa.Column("total_price", sa.Integer(), nullable=False),
        sa.Column("number_of_guests", sa.Integer(), nullable=False),
        sa.Column("guest_details", sa.JSON(), nullable=True),
        sa.Column("special_requests", sa.Text(), nullable=True),
        sa.Column("terms_accepted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("status_history", sa.JSON(), nullable=False),
        sa.Column("payment_status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("payment_id", sa.Integer(), nullable=True),
        _ts("cancellation_date", nullable=True),
        sa.Column("cancellation_reason", sa.String(length=30), nullable=True),
        sa.Column("cancellation_notes", sa.Text(), nullable=True),
        sa.Column("refund_amount", sa.Integer(), nullable=True),
        _ts("refund_date", nullable=True),
        sa.Column("checked_in", sa.Boolean(), nullable=False, server_default=sa.false()),
        _ts("check_in_date", nullable=True),
        _ts("last_notification_sent", nullable=True),
        _ts("updated_at"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_bookings_booking_reference", "bookings", ["booking_reference"], unique=True)
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"], unique=False)
    op.create_index("ix_bookings_cruise_id", "bookings", ["cruise_id"], unique=False)
    op.create_index("ix_bookings_departure_date", "bookings", ["departure_date"], unique=False)
    op.create_index("ix_bookings_status", "bookings", ["status"], unique=False)

    op.create_table(
        "payments",
        _id(),
        sa.Column("booking_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="USD"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("payment_method", sa.String(length=20), nullable=False),
        sa.Column("transaction_id", sa.String(length=120), nullable=True),
        sa.Column("payment_intent_id", sa.String(length=120), nullable=True),
        _ts("payment_date"),
        sa.Column("billing_address", sa.JSON(), nullable=True),
        sa.Column("card_last4", sa.String(length=4), nullable=True),
        sa.Column("expiry_month", sa.String(length=2), nullable=True),
        sa.Column("expiry_year", sa.String(length=4), nullable=True),
        sa.Column("cardholder_name", sa.String(length=200), nullable=True),
        sa.Column("refund_amount", sa.Integer(), nullable=True),
        _ts("refund_date", nullable=True),
        sa.Column("gateway_response", sa.JSON(), nullable=True),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_payments_booking_id", "payments", ["booking_id"], unique=False)
    op.create_index("ix_payments_status", "payments", ["status"], unique=False)

    op.create_table(
        "testimonials",
        _id(),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("cruise_name", sa.String(length=200), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("avatar_url", sa.String(length=512), nullable=True),
        sa.Column("cruise_id", sa.Integer(), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=True),
        _ts("created_at"),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_testimonials_cruise_id", "testimonials", ["cruise_id"], unique=False)

    op.create_table(
        "enquiries",
        _id(),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("phone", sa.String(length=40), nullable=True),
        sa.Column("subject", sa.String(length=200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="submitted"),
        _ts("created_at"),
        _ts("updated_at"),
        sa.Column("assigned_to_user_id", sa.Integer(), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_enquiries_status", "enquiries", ["status"], unique=False)
    op.create_index("ix_enquiries_user_id", "enquiries", ["user_id"], unique=False)

    op.create_table(
        "enquiry_responses",
        _id(),
        sa.Column("enquiry_id", sa.Integer(), nullable=False),
        sa.Column("response_text", sa.Text(), nullable=False),
        sa.Column("responded_by_user_id", sa.Integer(), nullable=True),
        _ts("responded_at"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_enquiry_responses_enquiry_id", "enquiry_responses", ["enquiry_id"], unique=False)


def downgrade() -> None:
    for table in (
        "enquiry_responses", "enquiries", "testimonials", "payments", "bookings",
        "amenities", "cabin_types", "cruises", "destinations", "users",
    ):
        op.drop_table(table)
