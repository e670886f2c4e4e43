"""Write model for replacing an event's custom field definitions."""

import logging
from abc import ABC, abstractmethod
from functools import partial
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.custom_fields.dtos import (
    CustomFieldDraftDTO,
    CustomFieldDTO,
    FieldSyncResultDTO,
    FieldType,
    PersistenceError,
)
from src.custom_fields.repository.claim_limits import SqlClaimLimitEnforcer
from src.custom_fields.repository.orm_models import CustomField
from src.custom_fields.sync import FieldSyncPlan, dropped_options, plan_field_sync
from src.custom_fields.validators import validate_field_definitions
from src.models.event import Event

logger = logging.getLogger(__name__)


class CustomFieldWriteModel(ABC):
    """Abstract base class for custom field definition writes."""

    @abstractmethod
    async def sync_fields(self, event_id: UUID, fields: Any) -> FieldSyncResultDTO | None:
        """Make the event's stored fields match ``fields`` exactly.

        Returns None when the event does not exist. Invalid definitions are
        reported in the result and nothing is written.
        """
        raise NotImplementedError


class SqlCustomFieldWriteModel(CustomFieldWriteModel):
    """SQL implementation of custom field definition writes."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(
        self,
        session_overwrite: AsyncSession | None = None,
        claim_limit_enforcer: SqlClaimLimitEnforcer | None = None,
    ) -> None:
        self.session_overwrite = session_overwrite
        self.claim_limit_enforcer = claim_limit_enforcer or SqlClaimLimitEnforcer()

    async def sync_fields(self, event_id: UUID, fields: Any) -> FieldSyncResultDTO | None:
        result = validate_field_definitions(fields)

        try:
            async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
                if await session.get(Event, event_id) is None:
                    return None
                if not result.valid:
                    return FieldSyncResultDTO(result=result)

                drafts = [
                    CustomFieldDraftDTO.from_mapping(position, raw)
                    for position, raw in enumerate(fields)
                ]
                stored = await self._get_fields(session, event_id)
                plan = plan_field_sync([CustomFieldDTO.from_orm(f) for f in stored], drafts)
                await self._apply(session, event_id, {f.uuid: f for f in stored}, plan)
                await session.flush()
                synced = await self._get_fields(session, event_id)
        except SQLAlchemyError as e:
            logger.exception("Failed to sync custom fields for event %s", event_id)
            raise PersistenceError("Could not save custom fields, please try again") from e

        logger.info(
            "Synced custom fields for event %s: %d added, %d updated, %d removed",
            event_id,
            len(plan.to_insert),
            len(plan.to_update),
            len(plan.to_delete),
        )
        return FieldSyncResultDTO(
            result=result, fields=[CustomFieldDTO.from_orm(f) for f in synced]
        )

    async def _get_fields(self, session: AsyncSession, event_id: UUID) -> list[CustomField]:
        result = await session.execute(
            select(CustomField)
            .where(CustomField.event_id == event_id)
            .order_by(CustomField.sort_order)
        )
        return list(result.scalars().all())

    async def _apply(
        self,
        session: AsyncSession,
        event_id: UUID,
        stored_by_id: dict[UUID, CustomField],
        plan: FieldSyncPlan,
    ) -> None:
        # answers and claims go with the field through ON DELETE CASCADE
        for removed in plan.to_delete:
            await session.delete(stored_by_id[removed.id])

        for stored, draft in plan.to_update:
            custom_field = stored_by_id[stored.id]
            custom_field.type = draft.type
            custom_field.label = draft.label
            custom_field.description = draft.description
            custom_field.required = draft.required
            custom_field.sort_order = draft.sort_order
            custom_field.options = draft.options
            custom_field.config = draft.config
            custom_field.touch()

            if draft.type == FieldType.SIGNUP:
                # hold the field against concurrent submissions while claims are rewritten
                await self.claim_limit_enforcer.lock_fields(session, [stored.id])
                claimed = await self.claim_limit_enforcer.rebuild_claims(
                    session, CustomFieldDTO.from_orm(custom_field)
                )
                released = dropped_options(stored, draft) if stored.type == FieldType.SIGNUP else []
                logger.debug(
                    "Rebuilt %d claim(s) on signup field %s, dropped options %s",
                    claimed,
                    stored.id,
                    released,
                )
            elif stored.type == FieldType.SIGNUP:
                await self.claim_limit_enforcer.release_claims(session, stored.id)

        for draft in plan.to_insert:
            session.add(
                CustomField(
                    event_id=event_id,
                    type=draft.type,
                    label=draft.label,
                    description=draft.description,
                    required=draft.required,
                    sort_order=draft.sort_order,
                    options=draft.options,
                    config=draft.config,
                )
            )
