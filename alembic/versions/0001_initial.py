"""create users, otp codes, qr records and telegram bindings

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("phone_number", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_phone_number", "users", ["phone_number"], unique=True)

    op.create_table(
        "otp_codes",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("phone_number", sa.String(length=32), nullable=False),
        sa.Column("code_hash", sa.String(length=256), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("failed_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_used", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_otp_codes_phone_number", "otp_codes", ["phone_number"], unique=False)
    op.create_index("ix_otp_codes_expires_at", "otp_codes", ["expires_at"], unique=False)

    op.create_table(
        "qr_code_records",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("check_in_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("check_out_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("guests_count", sa.Integer(), nullable=False),
        sa.Column("door_password", sa.String(length=128), nullable=False),
        sa.Column("payload_json", sa.Text(), nullable=False),
        sa.Column("qr_image_base64", sa.Text(), nullable=False),
        sa.Column("data_type", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("guests_count > 0", name="ck_qr_code_records_guests_count_positive"),
        sa.CheckConstraint("check_out_at > check_in_at", name="ck_qr_code_records_checkout_after_checkin"),
    )
    op.create_index("ix_qr_code_records_user_id", "qr_code_records", ["user_id"], unique=False)
    op.create_index("ix_qr_code_records_created_at", "qr_code_records", ["created_at"], unique=False)

    op.create_table(
        "telegram_bindings",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("chat_id", sa.BigInteger(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", name="uq_telegram_bindings_user_id"),
        sa.UniqueConstraint("chat_id", name="uq_telegram_bindings_chat_id"),
    )


def downgrade() -> None:
    op.drop_table("telegram_bindings")
    op.drop_index("ix_qr_code_records_created_at", table_name="qr_code_records")
    op.drop_index("ix_qr_code_records_user_id", table_name="qr_code_records")
    op.drop_table("qr_code_records")
    op.drop_index("ix_otp_codes_expires_at", table_name="otp_codes")
    op.drop_index("ix_otp_codes_phone_number", table_name="otp_codes")
    op.drop_table("otp_codes")
    op.drop_index("ix_users_phone_number", table_name="users")
    op.drop_table("users")
