import abc
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.custom_fields.aggregation import build_private_results, build_public_results
from src.custom_fields.claims import tally_claims
from src.custom_fields.dtos import (
    CustomFieldDTO,
    CustomResponseDTO,
    FieldType,
    GuestIdentityDTO,
    PrivateResultsDTO,
    PublicResultsDTO,
    RSVPCustomFieldsDTO,
)
from src.custom_fields.repository.orm_models import CustomField, CustomFieldResponse
from src.models.event import Event
from src.models.guest import Guest


class GuestIdentityReadModel(abc.ABC):
    @abc.abstractmethod
    async def get_guest_by_token(self, token: str) -> GuestIdentityDTO | None:
        """Resolve the guest an RSVP link belongs to, None for unknown tokens."""
        raise NotImplementedError


class CustomFieldReadModel(abc.ABC):
    @abc.abstractmethod
    async def get_rsvp_custom_fields(self, guest: GuestIdentityDTO) -> RSVPCustomFieldsDTO:
        """Questions for the guest's RSVP form, prefilled with their answers."""
        raise NotImplementedError

    @abc.abstractmethod
    async def get_private_results(self, event_id: UUID) -> PrivateResultsDTO | None:
        """Host view of every answer. None when the event does not exist."""
        raise NotImplementedError

    @abc.abstractmethod
    async def get_public_results(self, slug: str) -> PublicResultsDTO | None:
        """Anonymous tallies for a public event page.

        None when no event has the slug or the event is not public.
        """
        raise NotImplementedError


class SqlGuestIdentityReadModel(GuestIdentityReadModel):
    """SQL implementation of guest identity lookups."""

    async def get_guest_by_token(self, token: str) -> GuestIdentityDTO | None:
        async with async_session_manager() as session:
            result = await session.execute(select(Guest).where(Guest.rsvp_token == token))
            guest = result.scalar_one_or_none()
            if guest is None:
                return None
            return GuestIdentityDTO(id=guest.uuid, event_id=guest.event_id, name=guest.name)


class SqlCustomFieldReadModel(CustomFieldReadModel):
    """SQL implementation of custom field reads."""

    async def get_rsvp_custom_fields(self, guest: GuestIdentityDTO) -> RSVPCustomFieldsDTO:
        async with async_session_manager() as session:
            fields = await self._get_fields(session, guest.event_id)
            responses = await self._get_responses(session, [f.id for f in fields])

        signup_claims = {
            custom_field.id: tally_claims(custom_field, responses)
            for custom_field in fields
            if custom_field.type == FieldType.SIGNUP
        }
        return RSVPCustomFieldsDTO(
            fields=fields,
            responses=[response for response in responses if response.guest_id == guest.id],
            signup_claims=signup_claims,
        )

    async def get_private_results(self, event_id: UUID) -> PrivateResultsDTO | None:
        async with async_session_manager() as session:
            if await session.get(Event, event_id) is None:
                return None
            fields = await self._get_fields(session, event_id)
            responses = await self._get_responses(session, [f.id for f in fields])
        return build_private_results(fields, responses)

    async def get_public_results(self, slug: str) -> PublicResultsDTO | None:
        async with async_session_manager() as session:
            result = await session.execute(
                select(Event).where(Event.slug == slug).where(Event.is_public.is_(True))
            )
            event = result.scalar_one_or_none()
            if event is None:
                return None
            fields = [
                f for f in await self._get_fields(session, event.uuid) if f.type != FieldType.TEXT
            ]
            responses = await self._get_responses(session, [f.id for f in fields])
        return build_public_results(fields, responses)

    async def _get_fields(self, session: AsyncSession, event_id: UUID) -> list[CustomFieldDTO]:
        result = await session.execute(
            select(CustomField)
            .where(CustomField.event_id == event_id)
            .order_by(CustomField.sort_order)
        )
        return [CustomFieldDTO.from_orm(custom_field) for custom_field in result.scalars().all()]

    async def _get_responses(
        self, session: AsyncSession, field_ids: list[UUID]
    ) -> list[CustomResponseDTO]:
        if not field_ids:
            return []
        result = await session.execute(
            select(CustomFieldResponse, Guest.name)
            .outerjoin(Guest, CustomFieldResponse.guest_id == Guest.uuid)
            .where(CustomFieldResponse.field_id.in_(field_ids))
            .order_by(CustomFieldResponse.created_at)
        )
        return [
            CustomResponseDTO.from_orm(response, guest_name=guest_name)
            for response, guest_name in result.all()
        ]
