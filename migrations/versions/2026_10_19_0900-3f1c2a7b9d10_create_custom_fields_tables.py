"""create_custom_fields_tables

Revision ID: 3f1c2a7b9d10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "3f1c2a7b9d10"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.current_timestamp(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.current_timestamp(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "events",
        sa.Column("uuid", sa.UUID(), nullable=False),
        sa.Column("host_id", sa.UUID(), nullable=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("slug", sa.String(length=60), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index("ix_events_host_id", "events", ["host_id"])
    op.create_index("ix_events_slug", "events", ["slug"], unique=True)

    op.create_table(
        "guests",
        sa.Column("uuid", sa.UUID(), nullable=False),
        sa.Column("event_id", sa.UUID(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("rsvp_token", sa.String(length=36), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["event_id"], ["events.uuid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index("ix_guests_event_id", "guests", ["event_id"])
    op.create_index("ix_guests_rsvp_token", "guests", ["rsvp_token"], unique=True)

    op.create_table(
        "event_custom_fields",
        sa.Column("uuid", sa.UUID(), nullable=False),
        sa.Column("event_id", sa.UUID(), nullable=False),
        sa.Column(
            "type",
            sa.Enum("text", "poll", "signup", name="custom_field_type_enum"),
            nullable=False,
        ),
        sa.Column("label", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("options", sa.JSON(), nullable=True),
        sa.Column("config", sa.JSON(), nullable=False),
        sa.Column("claims_version", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["event_id"], ["events.uuid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uuid"),
    )
    op.create_index("ix_event_custom_fields_event_id", "event_custom_fields", ["event_id"])

    op.create_table(
        "custom_field_responses",
        sa.Column("uuid", sa.UUID(), nullable=False),
        sa.Column("field_id", sa.UUID(), nullable=False),
        sa.Column("guest_id", sa.UUID(), nullable=False),
        sa.Column("value", sa.Text(), nullable=False, server_default=""),
        *_timestamps(),
        sa.ForeignKeyConstraint(["field_id"], ["event_custom_fields.uuid"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["guest_id"], ["guests.uuid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uuid"),
        sa.UniqueConstraint(
            "field_id", "guest_id", name="custom_field_responses_field_guest_unique"
        ),
    )
    op.create_index("ix_custom_field_responses_field_id", "custom_field_responses", ["field_id"])
    op.create_index("ix_custom_field_responses_guest_id", "custom_field_responses", ["guest_id"])

    op.create_table(
        "signup_claims",
        sa.Column("uuid", sa.UUID(), nullable=False),
        sa.Column("field_id", sa.UUID(), nullable=False),
        sa.Column("guest_id", sa.UUID(), nullable=False),
        sa.Column("option", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["field_id"], ["event_custom_fields.uuid"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["guest_id"], ["guests.uuid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uuid"),
        sa.UniqueConstraint(
            "field_id", "option", "guest_id", name="signup_claims_field_option_guest_unique"
        ),
    )
    op.create_index("ix_signup_claims_field_id", "signup_claims", ["field_id"])
    op.create_index("ix_signup_claims_guest_id", "signup_claims", ["guest_id"])


def downgrade() -> None:
    op.drop_index("ix_signup_claims_guest_id", table_name="signup_claims")
    op.drop_index("ix_signup_claims_field_id", table_name="signup_claims")
    op.drop_table("signup_claims")
    op.drop_index("ix_custom_field_responses_guest_id", table_name="custom_field_responses")
    op.drop_index("ix_custom_field_responses_field_id", table_name="custom_field_responses")
    op.drop_table("custom_field_responses")
    op.drop_index("ix_event_custom_fields_event_id", table_name="event_custom_fields")
    op.drop_table("event_custom_fields")
    sa.Enum(name="custom_field_type_enum").drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_guests_rsvp_token", table_name="guests")
    op.drop_index("ix_guests_event_id", table_name="guests")
    op.drop_table("guests")
    op.drop_index("ix_events_slug", table_name="events")
    op.drop_index("ix_events_host_id", table_name="events")
    op.drop_table("events")
