"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates the users, categories, events, and requests tables.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

event_state = sa.Enum("PENDING", "PUBLISHED", "CANCELED", name="eventstate")
request_status = sa.Enum("PENDING", "CONFIRMED", "REJECTED", "CANCELED", name="requeststatus")


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(250), nullable=False),
        sa.Column("email", sa.String(254), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- categories ---
    op.create_table(
        "categories",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False, unique=True),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("annotation", sa.String(2000), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("event_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location_lat", sa.Float, nullable=False),
        sa.Column("location_lon", sa.Float, nullable=False),
        sa.Column("paid", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("participant_limit", sa.Integer, nullable=False, server_default="0"),
        sa.Column("request_moderation", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("state", event_state, nullable=False, server_default="PENDING"),
        sa.Column("created_on", sa.DateTime(timezone=True), nullable=False),
        sa.Column("published_on", sa.DateTime(timezone=True), nullable=True),
        sa.Column("title", sa.String(120), nullable=False),
        sa.Column("category_id", sa.String(36), sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("initiator_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
    )
    op.create_index("ix_events_initiator_id", "events", ["initiator_id"])

    # --- requests ---
    op.create_table(
        "requests",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("requester_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", request_status, nullable=False, server_default="PENDING"),
        sa.Column("created", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_requests_event_status", "requests", ["event_id", "status"])
    op.create_index("ix_requests_requester_id", "requests", ["requester_id"])


def downgrade() -> None:
    op.drop_index("ix_requests_requester_id", table_name="requests")
    op.drop_index("ix_requests_event_status", table_name="requests")
    op.drop_table("requests")
    op.drop_index("ix_events_initiator_id", table_name="events")
    op.drop_table("events")
    op.drop_table("categories")
    op.drop_table("users")
    request_status.drop(op.get_bind(), checkfirst=True)
    event_state.drop(op.get_bind(), checkfirst=True)
