"""Initial schema: users, cabs, bookings, payments.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


CAB_TYPES = ("Mini", "Sedan", "SUV", "Luxury")
BOOKING_STATUSES = ("Pending", "Confirmed", "InProgress", "Completed", "Cancelled")
PAYMENT_METHODS = ("CreditCard", "DebitCard", "UPI", "Wallet", "Cash")
PAYMENT_STATUSES = ("Pending", "Completed", "Failed", "Refunded")


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name, sa.DateTime(timezone=True), server_default=sa.func.now()
    )


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        _timestamp("registration_date"),
    )

    # ── cabs ──────────────────────────────────────────────────────────
    op.create_table(
        "cabs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("cab_type", sa.Enum(*CAB_TYPES, name="cabtype"), nullable=False),
        sa.Column("is_available", sa.Boolean, nullable=False, default=True),
        _timestamp("created_at"),
    )
    op.create_index(
        "idx_cabs_type_available", "cabs", ["cab_type", "is_available"]
    )

    # ── bookings ──────────────────────────────────────────────────────
    op.create_table(
        "bookings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("pickup_location", sa.String(255), nullable=False),
        sa.Column("dropoff_location", sa.String(255), nullable=False),
        sa.Column("pickup_latitude", sa.String(64), nullable=True),
        sa.Column("pickup_longitude", sa.String(64), nullable=True),
        sa.Column("dropoff_latitude", sa.String(64), nullable=True),
        sa.Column("dropoff_longitude", sa.String(64), nullable=True),
        sa.Column("cab_id", sa.String(36), sa.ForeignKey("cabs.id"), nullable=True),
        sa.Column("cab", sa.JSON, nullable=True),
        sa.Column("cab_type", sa.String(20), nullable=False),
        sa.Column("distance", sa.Float, nullable=False),
        sa.Column("fare", sa.Numeric(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*BOOKING_STATUSES, name="bookingstatus"),
            nullable=False,
            default="Pending",
        ),
        _timestamp("booking_time"),
        sa.Column(
            "user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("rider", sa.JSON, nullable=True),
    )
    op.create_index("idx_bookings_user", "bookings", ["user_id"])
    op.create_index("idx_bookings_status", "bookings", ["status"])
    op.create_index("idx_bookings_time", "bookings", ["booking_time"])

    # ── payments ──────────────────────────────────────────────────────
    op.create_table(
        "payments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "booking_id", sa.String(36), sa.ForeignKey("bookings.id"), nullable=False
        ),
        sa.Column("booking", sa.JSON, nullable=True),
        sa.Column(
            "user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("rider", sa.JSON, nullable=True),
        sa.Column("amount", sa.Numeric(), nullable=False),
        sa.Column(
            "method", sa.Enum(*PAYMENT_METHODS, name="paymentmethod"), nullable=False
        ),
        sa.Column(
            "status",
            sa.Enum(*PAYMENT_STATUSES, name="paymentstatus"),
            nullable=False,
            default="Pending",
        ),
        _timestamp("payment_date"),
        sa.Column("transaction_id", sa.String(100), nullable=True),
        sa.Column("payment_details", sa.String(500), nullable=True),
    )
    op.create_index("idx_payments_booking", "payments", ["booking_id"])
    op.create_index("idx_payments_user", "payments", ["user_id"])


def downgrade() -> None:
    op.drop_table("payments")
    op.drop_table("bookings")
    op.drop_table("cabs")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS paymentstatus")
    op.execute("DROP TYPE IF EXISTS paymentmethod")
    op.execute("DROP TYPE IF EXISTS bookingstatus")
    op.execute("DROP TYPE IF EXISTS cabtype")
