from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, declarative_base, mapped_column
from sqlalchemy_utils import UUIDType

BaseModel = declarative_base(
    type_annotation_map={
        UUID: UUIDType,
        # field options and per-type config live in JSON columns
        list[str]: sa.JSON,
        dict[str, Any]: sa.JSON,
    }
)


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(BaseModel):
    __abstract__ = True

    uuid: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)


class TimeStamp(BaseModel):
    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.current_timestamp(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.current_timestamp(),
        onupdate=sa.func.current_timestamp(),
        nullable=False,
    )

    def touch(self, now: datetime | None = None) -> datetime:
        """Stamp the row as changed now; new rows get ``created_at`` too."""
        now = now or utcnow()
        if self.created_at is None:
            self.created_at = now
        self.updated_at = now
        return now
