"""Signup capacity enforcement against the database.

Every method runs inside the caller's session so that the capacity check and
the write of the new claims commit (or roll back) together.

Concurrency: ``lock_fields`` bumps ``claims_version`` on each signup field the
submission selects from. The UPDATE takes the field row's write lock, held
until the transaction ends, so two submissions to the same field run their
check-then-write one after the other and the second one reads the claims the
first committed. Submissions to different fields lock different rows and do
not wait on each other. Fields are locked in a fixed order so two
submissions spanning the same fields cannot deadlock. On SQLite the UPDATE
takes the database write lock instead, which is coarser but just as safe.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.custom_fields.claims import find_capacity_issues
from src.custom_fields.dtos import CustomFieldDTO, ValidationIssue
from src.custom_fields.repository.orm_models import CustomField, CustomFieldResponse, SignupClaim
from src.custom_fields.validators import option_lookup, split_selection

logger = logging.getLogger(__name__)


class SqlClaimLimitEnforcer:
    """Keeps every signup option within its ``max_claims_per_item``."""

    async def lock_fields(self, session: AsyncSession, field_ids: Iterable[UUID]) -> None:
        for field_id in sorted(set(field_ids), key=str):
            await session.execute(
                update(CustomField)
                .where(CustomField.uuid == field_id)
                .values(
                    claims_version=CustomField.claims_version + 1,
                    # not a definition change, keep the timestamp
                    updated_at=CustomField.updated_at,
                )
                .execution_options(synchronize_session=False)
            )

    async def claims_by_others(
        self, session: AsyncSession, custom_field: CustomFieldDTO, guest_id: UUID
    ) -> dict[str, int]:
        """Distinct guests per option, leaving out ``guest_id`` itself."""
        result = await session.execute(
            select(SignupClaim.option, SignupClaim.guest_id)
            .where(SignupClaim.field_id == custom_field.id)
            .where(SignupClaim.guest_id != guest_id)
        )
        lookup = option_lookup(custom_field.options)
        holders: dict[str, set[UUID]] = defaultdict(set)
        for option, holder_id in result.all():
            canonical = lookup.get(option.strip().lower())
            if canonical is not None:
                holders[canonical].add(holder_id)
        return {option: len(guests) for option, guests in holders.items()}

    async def check(
        self,
        session: AsyncSession,
        guest_id: UUID,
        selections: Sequence[tuple[CustomFieldDTO, Sequence[str]]],
    ) -> list[ValidationIssue]:
        """Capacity issues for the guest's selections.

        Call after ``lock_fields`` so the counts cannot change before commit.
        """
        issues = []
        for custom_field, selected in selections:
            others = await self.claims_by_others(session, custom_field, guest_id)
            field_issues = find_capacity_issues(custom_field, selected, others)
            if field_issues:
                logger.info(
                    "Signup field %s rejected %d option(s) for guest %s",
                    custom_field.id,
                    len(field_issues),
                    guest_id,
                )
            issues.extend(field_issues)
        return issues

    async def replace_claims(
        self, session: AsyncSession, field_id: UUID, guest_id: UUID, selected: Sequence[str]
    ) -> None:
        """Make the guest's claim rows on the field match ``selected`` exactly."""
        await session.execute(
            delete(SignupClaim)
            .where(SignupClaim.field_id == field_id)
            .where(SignupClaim.guest_id == guest_id)
            .execution_options(synchronize_session=False)
        )
        for option in selected:
            session.add(SignupClaim(field_id=field_id, guest_id=guest_id, option=option))

    async def release_claims(self, session: AsyncSession, field_id: UUID) -> None:
        """Drop every claim on the field, for a field that is no longer a signup."""
        await session.execute(
            delete(SignupClaim)
            .where(SignupClaim.field_id == field_id)
            .execution_options(synchronize_session=False)
        )

    async def rebuild_claims(self, session: AsyncSession, custom_field: CustomFieldDTO) -> int:
        """Rewrite the field's claim rows from the answers guests have stored.

        Claims then count the same selections the host sees in the results:
        answers given before the field became a signup, or to an option that
        was dropped and offered again, hold their place. Tokens the field no
        longer offers claim nothing. Returns the number of claim rows written.
        """
        await self.release_claims(session, custom_field.id)
        result = await session.execute(
            select(CustomFieldResponse.guest_id, CustomFieldResponse.value).where(
                CustomFieldResponse.field_id == custom_field.id
            )
        )
        lookup = option_lookup(custom_field.options)
        written = 0
        for guest_id, value in result.all():
            claimed = {
                lookup[token.lower()]
                for token in split_selection(value or "")
                if token.lower() in lookup
            }
            for option in sorted(claimed):
                session.add(SignupClaim(field_id=custom_field.id, guest_id=guest_id, option=option))
            written += len(claimed)
        return written
