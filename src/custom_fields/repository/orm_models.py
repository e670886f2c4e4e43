from typing import Any
from uuid import UUID

from sqlalchemy import Boolean, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.config.table_names import TableNames
from src.custom_fields.dtos import FieldType
from src.models.base import Base, TimeStamp


class CustomField(Base, TimeStamp):
    __tablename__ = TableNames.CUSTOM_FIELDS.value

    event_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.EVENTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(
        Enum(FieldType, name="custom_field_type_enum", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    label: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    options: Mapped[list[str] | None] = mapped_column(nullable=True)
    config: Mapped[dict[str, Any]] = mapped_column(default=dict, nullable=False)

    # Bumped by every signup submission; the UPDATE doubles as the per-field write lock
    claims_version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<CustomField {self.type} {self.label!r}>"


class CustomFieldResponse(Base, TimeStamp):
    __tablename__ = TableNames.CUSTOM_FIELD_RESPONSES.value
    __table_args__ = (
        UniqueConstraint("field_id", "guest_id", name="custom_field_responses_field_guest_unique"),
    )

    field_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.CUSTOM_FIELDS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    guest_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # comma-separated option list for poll and signup fields
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def __repr__(self) -> str:
        return f"<CustomFieldResponse field={self.field_id} guest={self.guest_id}>"


class SignupClaim(Base, TimeStamp):
    """One guest holding one option of a signup field."""

    __tablename__ = TableNames.SIGNUP_CLAIMS.value
    __table_args__ = (
        UniqueConstraint("field_id", "option", "guest_id", name="signup_claims_field_option_guest_unique"),
    )

    field_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.CUSTOM_FIELDS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    guest_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    option: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<SignupClaim {self.option!r} guest={self.guest_id}>"
