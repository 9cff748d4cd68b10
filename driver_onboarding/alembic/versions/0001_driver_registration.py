"""driver registration tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

DRIVER_STATUS = sa.Enum(
    "profile_created", "documents_submitted", "vehicle_added",
    "pending_verification", "verified", "deactivated",
    name="driver_status",
)
DOCUMENT_TYPE = sa.Enum("license", "identity", "insurance", "vehicle_registration", name="document_type")
VEHICLE_TYPE = sa.Enum("sedan", "suv", "van", "truck", "motorcycle", name="vehicle_type")


def upgrade() -> None:
    op.create_table(
        "driver_profiles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("status", DRIVER_STATUS, nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False),
        sa.Column("license_number", sa.String(50), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=False),
        sa.Column("phone_number", sa.String(32), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("full_name", sa.String(200), nullable=True),
        sa.Column("experience_years", sa.Integer(), nullable=True),
        sa.Column("rating", sa.Float(), nullable=False),
        sa.Column("rating_count", sa.Integer(), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.String(500), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verification_notes", sa.String(500), nullable=True),
        sa.Column("deactivated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deactivation_reason", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", name="uq_driver_profiles_user_id"),
    )
    op.create_index("ix_driver_profiles_user_id", "driver_profiles", ["user_id"])
    op.create_index("ix_driver_profiles_status", "driver_profiles", ["status"])

    op.create_table(
        "driver_documents",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("driver_id", sa.Integer(), sa.ForeignKey("driver_profiles.id"), nullable=False),
        sa.Column("type", DOCUMENT_TYPE, nullable=False),
        sa.Column("storage_ref", sa.String(400), nullable=False),
        sa.Column("filename", sa.String(255), nullable=True),
        sa.Column("content_type", sa.String(100), nullable=False),
        sa.Column("size_bytes", sa.Integer(), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("superseded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_driver_documents_driver_id", "driver_documents", ["driver_id"])
    op.create_index(
        "uq_driver_documents_current",
        "driver_documents",
        ["driver_id", "type"],
        unique=True,
        postgresql_where=sa.text("superseded_at IS NULL"),
        sqlite_where=sa.text("superseded_at IS NULL"),
    )

    op.create_table(
        "vehicles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("driver_id", sa.Integer(), sa.ForeignKey("driver_profiles.id"), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("type", VEHICLE_TYPE, nullable=False),
        sa.Column("plate_number", sa.String(20), nullable=False),
        sa.Column("manufacture_year", sa.Integer(), nullable=True),
        sa.Column("model", sa.String(80), nullable=True),
        sa.Column("color", sa.String(40), nullable=True),
        sa.Column("max_weight", sa.Float(), nullable=False),
        sa.Column("max_volume", sa.Float(), nullable=False),
        sa.Column("max_packages", sa.Integer(), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("driver_id", name="uq_vehicles_driver_id"),
    )
    op.create_index("ix_vehicles_driver_id", "vehicles", ["driver_id"])


def downgrade() -> None:
    op.drop_table("vehicles")
    op.drop_table("driver_documents")
    op.drop_table("driver_profiles")
    bind = op.get_bind()
    for enum in (VEHICLE_TYPE, DOCUMENT_TYPE, DRIVER_STATUS):
        enum.drop(bind, checkfirst=True)
