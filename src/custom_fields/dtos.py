from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

from src.custom_fields.constants import DEFAULT_MAX_CLAIMS_PER_ITEM

if TYPE_CHECKING:
    from src.custom_fields.repository.orm_models import CustomField, CustomFieldResponse


class PersistenceError(Exception):
    """Raised when the database fails in a way the caller may retry.

    Never used for bad input: validation problems are returned as values.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class FieldType(str, Enum):
    TEXT = "text"
    POLL = "poll"
    SIGNUP = "signup"

    @property
    def has_options(self) -> bool:
        return self in (FieldType.POLL, FieldType.SIGNUP)


class IssueKind(str, Enum):
    SCHEMA = "schema"
    MISSING_REQUIRED = "missing_required"
    TOO_LONG = "too_long"
    INVALID_OPTION = "invalid_option"
    INVALID_VALUE = "invalid_value"
    UNKNOWN_FIELD = "unknown_field"
    DUPLICATE_RESPONSE = "duplicate_response"
    CAPACITY = "capacity"


@dataclass(frozen=True)
class ValidationIssue:
    """One user-facing problem with a definition or an answer."""

    kind: IssueKind
    message: str
    field_label: str | None = None
    option: str | None = None

    @property
    def is_capacity(self) -> bool:
        return self.kind == IssueKind.CAPACITY


@dataclass(frozen=True)
class ValidationResult:
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.issues

    @property
    def errors(self) -> list[str]:
        return [issue.message for issue in self.issues]

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(issues=[*self.issues, *other.issues])


@dataclass(frozen=True)
class CustomFieldDTO:
    """A persisted question attached to an event."""

    id: UUID
    event_id: UUID
    type: FieldType
    label: str
    required: bool = False
    sort_order: int = 0
    description: str | None = None
    options: list[str] | None = None
    config: dict[str, Any] = field(default_factory=dict)

    @property
    def max_claims_per_item(self) -> int:
        return self.config.get("max_claims_per_item", DEFAULT_MAX_CLAIMS_PER_ITEM)

    @property
    def multi_select(self) -> bool:
        return bool(self.config.get("multi_select", False))

    @classmethod
    def from_orm(cls, custom_field: "CustomField") -> "CustomFieldDTO":
        return cls(
            id=custom_field.uuid,
            event_id=custom_field.event_id,
            type=FieldType(custom_field.type),
            label=custom_field.label,
            required=custom_field.required,
            sort_order=custom_field.sort_order,
            description=custom_field.description,
            options=list(custom_field.options) if custom_field.options is not None else None,
            config=dict(custom_field.config or {}),
        )


@dataclass(frozen=True)
class CustomFieldDraftDTO:
    """A definition as submitted by the host, after it passed validation."""

    type: FieldType
    label: str
    sort_order: int
    required: bool = False
    description: str | None = None
    options: list[str] | None = None
    config: dict[str, Any] = field(default_factory=dict)
    id: UUID | None = None

    @classmethod
    def from_mapping(cls, position: int, raw: Mapping[str, Any]) -> "CustomFieldDraftDTO":
        field_type = FieldType(raw["type"])
        draft_id = raw.get("id")
        if draft_id is not None and not isinstance(draft_id, UUID):
            try:
                draft_id = UUID(str(draft_id))
            except ValueError:
                draft_id = None
        options = None
        if field_type.has_options:
            options = [option.strip() for option in raw["options"]]
        sort_order = raw.get("sort_order")
        return cls(
            id=draft_id,
            type=field_type,
            label=raw["label"].strip(),
            description=raw.get("description") or None,
            required=bool(raw.get("required", False)),
            sort_order=sort_order if isinstance(sort_order, int) else position,
            options=options,
            config=dict(raw.get("config") or {}),
        )


@dataclass(frozen=True)
class NormalizedResponseDTO:
    """An accepted answer, ready to be upserted."""

    field_id: UUID
    field_type: FieldType
    value: str
    # canonical option spellings, empty for text fields
    selected: tuple[str, ...] = ()


@dataclass(frozen=True)
class CustomResponseDTO:
    id: UUID
    field_id: UUID
    guest_id: UUID
    value: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    guest_name: str | None = None

    @classmethod
    def from_orm(
        cls, response: "CustomFieldResponse", guest_name: str | None = None
    ) -> "CustomResponseDTO":
        return cls(
            id=response.uuid,
            field_id=response.field_id,
            guest_id=response.guest_id,
            value=response.value or "",
            created_at=response.created_at,
            updated_at=response.updated_at,
            guest_name=guest_name,
        )


@dataclass(frozen=True)
class SubmissionResultDTO:
    """Outcome of one RSVP submission of custom responses."""

    result: ValidationResult
    responses: list[CustomResponseDTO] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return self.result.valid

    @property
    def errors(self) -> list[str]:
        return self.result.errors


@dataclass(frozen=True)
class FieldSyncResultDTO:
    result: ValidationResult
    fields: list[CustomFieldDTO] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return self.result.valid

    @property
    def errors(self) -> list[str]:
        return self.result.errors


@dataclass(frozen=True)
class GuestIdentityDTO:
    id: UUID
    event_id: UUID
    name: str


@dataclass(frozen=True)
class PollResultDTO:
    field_id: UUID
    label: str
    options: list[str]
    votes: dict[str, int]
    total_votes: int
    multi_select: bool = False
    description: str | None = None


@dataclass(frozen=True)
class SignupResultDTO:
    field_id: UUID
    label: str
    options: list[str]
    max_claims_per_item: int
    claims: dict[str, int]
    remaining: dict[str, int]
    full: dict[str, bool]
    description: str | None = None
    # only filled for the host view
    claimant_names: dict[str, list[str]] | None = None


@dataclass(frozen=True)
class TextAnswerDTO:
    guest_name: str
    value: str


@dataclass(frozen=True)
class TextResultDTO:
    field_id: UUID
    label: str
    answers: list[TextAnswerDTO]
    description: str | None = None


@dataclass(frozen=True)
class PublicResultsDTO:
    polls: list[PollResultDTO] = field(default_factory=list)
    signups: list[SignupResultDTO] = field(default_factory=list)


@dataclass(frozen=True)
class PrivateResultsDTO:
    polls: list[PollResultDTO] = field(default_factory=list)
    signups: list[SignupResultDTO] = field(default_factory=list)
    texts: list[TextResultDTO] = field(default_factory=list)


@dataclass(frozen=True)
class RSVPCustomFieldsDTO:
    """What a guest's RSVP form needs: questions, own answers, signup availability."""

    fields: list[CustomFieldDTO]
    responses: list[CustomResponseDTO]
    signup_claims: dict[UUID, dict[str, int]]
