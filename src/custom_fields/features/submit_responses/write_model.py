"""Write model for guest answers to an event's custom fields.

A submission is all-or-nothing: the answers are validated against the current
definitions, signup selections are checked against capacity while the fields
are locked, and only then are answers and claims written in one transaction.
"""

import logging
from abc import ABC, abstractmethod
from functools import partial
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.config.settings import settings
from src.custom_fields.dtos import (
    CustomFieldDTO,
    CustomResponseDTO,
    FieldType,
    GuestIdentityDTO,
    NormalizedResponseDTO,
    PersistenceError,
    SubmissionResultDTO,
    ValidationResult,
)
from src.custom_fields.repository.claim_limits import SqlClaimLimitEnforcer
from src.custom_fields.repository.orm_models import CustomField, CustomFieldResponse
from src.custom_fields.validators import validate_responses

logger = logging.getLogger(__name__)


class CustomResponseWriteModel(ABC):
    """Abstract base class for custom response write operations."""

    @abstractmethod
    async def submit_responses(
        self, guest: GuestIdentityDTO, custom_responses: Any
    ) -> SubmissionResultDTO:
        """Validate and store a guest's answers.

        Args:
            guest: The guest answering, already resolved from the RSVP token
            custom_responses: The raw ``[{field_id, value}, ...]`` payload

        Returns:
            SubmissionResultDTO carrying either the saved answers or every
            problem found. Nothing is written when there is a problem.

        Raises:
            PersistenceError: the database kept failing after retries
        """
        raise NotImplementedError


class SqlCustomResponseWriteModel(CustomResponseWriteModel):
    """SQL implementation of custom response write operations."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(
        self,
        session_overwrite: AsyncSession | None = None,
        claim_limit_enforcer: SqlClaimLimitEnforcer | None = None,
        retry_attempts: int | None = None,
    ) -> None:
        self.session_overwrite = session_overwrite
        self.claim_limit_enforcer = claim_limit_enforcer or SqlClaimLimitEnforcer()
        self.retry_attempts = max(retry_attempts or settings.submission_retry_attempts, 1)

    async def submit_responses(
        self, guest: GuestIdentityDTO, custom_responses: Any
    ) -> SubmissionResultDTO:
        if isinstance(custom_responses, (list, tuple)) and not custom_responses:
            return SubmissionResultDTO(result=ValidationResult())

        last_error: SQLAlchemyError | None = None
        for attempt in range(1, self.retry_attempts + 1):
            try:
                return await self._submit_once(guest, custom_responses)
            except (IntegrityError, OperationalError) as e:
                # a concurrent writer got there first, start over from fresh state
                last_error = e
                if self.session_overwrite is not None:
                    await self.session_overwrite.rollback()
                logger.warning(
                    "Conflict saving custom responses for guest %s (attempt %d/%d): %s",
                    guest.id,
                    attempt,
                    self.retry_attempts,
                    e.__class__.__name__,
                )
            except SQLAlchemyError as e:
                logger.exception("Failed to save custom responses for guest %s", guest.id)
                raise PersistenceError("Could not save your responses, please try again") from e

        logger.error(
            "Giving up on custom responses for guest %s after %d attempts",
            guest.id,
            self.retry_attempts,
        )
        raise PersistenceError("Could not save your responses, please try again") from last_error

    async def _submit_once(
        self, guest: GuestIdentityDTO, custom_responses: Any
    ) -> SubmissionResultDTO:
        async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
            fields = await self._get_fields(session, guest.event_id)
            result, normalized = validate_responses(custom_responses, fields)

            fields_by_id = {custom_field.id: custom_field for custom_field in fields}
            selections = [
                (fields_by_id[response.field_id], response.selected)
                for response in normalized
                if response.field_type == FieldType.SIGNUP and response.selected
            ]
            if selections:
                await self.claim_limit_enforcer.lock_fields(
                    session, [custom_field.id for custom_field, _ in selections]
                )
                capacity_issues = await self.claim_limit_enforcer.check(
                    session, guest.id, selections
                )
                result = result.merge(ValidationResult(issues=capacity_issues))

            if not result.valid:
                await session.rollback()
                return SubmissionResultDTO(result=result)

            saved = []
            for response in normalized:
                saved.append(await self._upsert_response(session, guest, response))
                if response.field_type == FieldType.SIGNUP:
                    await self.claim_limit_enforcer.replace_claims(
                        session, response.field_id, guest.id, response.selected
                    )
            await session.flush()

        logger.info("Saved %d custom response(s) for guest %s", len(saved), guest.id)
        return SubmissionResultDTO(result=result, responses=saved)

    async def _get_fields(self, session: AsyncSession, event_id: UUID) -> list[CustomFieldDTO]:
        result = await session.execute(
            select(CustomField)
            .where(CustomField.event_id == event_id)
            .order_by(CustomField.sort_order)
        )
        return [CustomFieldDTO.from_orm(custom_field) for custom_field in result.scalars().all()]

    async def _upsert_response(
        self, session: AsyncSession, guest: GuestIdentityDTO, response: NormalizedResponseDTO
    ) -> CustomResponseDTO:
        result = await session.execute(
            select(CustomFieldResponse)
            .where(CustomFieldResponse.field_id == response.field_id)
            .where(CustomFieldResponse.guest_id == guest.id)
        )
        stored = result.scalar_one_or_none()

        if stored is None:
            stored = CustomFieldResponse(field_id=response.field_id, guest_id=guest.id)
            session.add(stored)
        stored.value = response.value
        stored.touch()
        await session.flush()
        return CustomResponseDTO.from_orm(stored, guest_name=guest.name)
