from dataclasses import asdict
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from src.custom_fields.dtos import (
    CustomFieldDTO,
    CustomResponseDTO,
    FieldType,
    PrivateResultsDTO,
    PublicResultsDTO,
)


class FieldDefinitionResponse(BaseModel):
    id: UUID
    event_id: UUID
    type: FieldType
    label: str
    description: str | None = None
    required: bool
    sort_order: int
    options: list[str] | None = None
    config: dict[str, Any] = {}

    @classmethod
    def from_dto(cls, custom_field: CustomFieldDTO) -> "FieldDefinitionResponse":
        return cls(**asdict(custom_field))


class SavedAnswerResponse(BaseModel):
    """A stored answer as the guest sees it."""

    id: UUID
    field_id: UUID
    value: str

    @classmethod
    def from_dto(cls, response: CustomResponseDTO) -> "SavedAnswerResponse":
        return cls(id=response.id, field_id=response.field_id, value=response.value)


class ValidationErrorResponse(BaseModel):
    """Body of every 400: the full list of problems, nothing was saved."""

    valid: bool = False
    errors: list[str]


class PollResultResponse(BaseModel):
    field_id: UUID
    label: str
    description: str | None = None
    options: list[str]
    multi_select: bool
    votes: dict[str, int]
    total_votes: int


class SignupResultResponse(BaseModel):
    field_id: UUID
    label: str
    description: str | None = None
    options: list[str]
    max_claims_per_item: int
    claims: dict[str, int]
    remaining: dict[str, int]
    full: dict[str, bool]


class PrivateSignupResultResponse(SignupResultResponse):
    claimant_names: dict[str, list[str]]


class TextAnswerResponse(BaseModel):
    guest_name: str
    value: str


class TextResultResponse(BaseModel):
    field_id: UUID
    label: str
    description: str | None = None
    answers: list[TextAnswerResponse]


class PublicResultsResponse(BaseModel):
    polls: list[PollResultResponse]
    signups: list[SignupResultResponse]

    @classmethod
    def from_dto(cls, results: PublicResultsDTO) -> "PublicResultsResponse":
        return cls(**asdict(results))


class PrivateResultsResponse(BaseModel):
    polls: list[PollResultResponse]
    signups: list[PrivateSignupResultResponse]
    texts: list[TextResultResponse]

    @classmethod
    def from_dto(cls, results: PrivateResultsDTO) -> "PrivateResultsResponse":
        return cls(**asdict(results))
