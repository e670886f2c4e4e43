"""Validation of custom field definitions (host side) and answers (guest side).

Both validators accumulate every problem instead of stopping at the first one,
so a host or guest can fix everything in a single pass. Problems are returned
as ``ValidationIssue`` values; nothing here raises for bad input.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any
from uuid import UUID

from src.custom_fields.constants import (
    MAX_CUSTOM_FIELDS_PER_EVENT,
    MAX_LABEL_LENGTH,
    MAX_OPTIONS_PER_FIELD,
    MAX_TEXT_RESPONSE_LENGTH,
    MIN_OPTIONS_PER_FIELD,
    OPTION_SEPARATOR,
)
from src.custom_fields.dtos import (
    CustomFieldDTO,
    FieldType,
    IssueKind,
    NormalizedResponseDTO,
    ValidationIssue,
    ValidationResult,
)

FIELD_TYPE_CHOICES = "'text', 'poll', or 'signup'"


def split_selection(value: str) -> list[str]:
    """Split a stored or submitted answer into trimmed, non-empty tokens."""
    return [token.strip() for token in value.split(",") if token.strip()]


def option_lookup(options: Iterable[str] | None) -> dict[str, str]:
    """Map the case-folded spelling of each option to its defined spelling."""
    return {option.strip().lower(): option for option in options or []}


def parse_uuid(raw: Any) -> UUID | None:
    if isinstance(raw, UUID):
        return raw
    try:
        return UUID(str(raw))
    except ValueError:
        return None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _schema_issue(message: str) -> ValidationIssue:
    return ValidationIssue(kind=IssueKind.SCHEMA, message=message)


# ---------------------------------------------------------------------------
# Field definitions
# ---------------------------------------------------------------------------


def _check_options(prefix: str, field_type: FieldType, options: Any) -> list[ValidationIssue]:
    if not isinstance(options, (list, tuple)):
        return [_schema_issue(f"{prefix}: Options are required for {field_type.value} fields")]

    issues = []
    if len(options) < MIN_OPTIONS_PER_FIELD:
        issues.append(_schema_issue(f"{prefix}: At least {MIN_OPTIONS_PER_FIELD} options are required"))
    if len(options) > MAX_OPTIONS_PER_FIELD:
        issues.append(_schema_issue(f"{prefix}: Maximum {MAX_OPTIONS_PER_FIELD} options allowed"))

    if any(not isinstance(option, str) or not option.strip() for option in options):
        issues.append(_schema_issue(f"{prefix}: All options must be non-empty strings"))

    # answers are stored comma-separated
    if any(isinstance(option, str) and "," in option for option in options):
        issues.append(_schema_issue(f"{prefix}: Options cannot contain commas"))

    folded = [option.strip().lower() for option in options if isinstance(option, str)]
    if len(set(folded)) != len(folded):
        issues.append(_schema_issue(f"{prefix}: Duplicate options are not allowed"))
    return issues


def _check_config(prefix: str, field_type: FieldType | None, config: Any) -> list[ValidationIssue]:
    if config is None:
        return []
    if not isinstance(config, Mapping):
        return [_schema_issue(f"{prefix}: Config must be an object")]

    issues = []
    if field_type == FieldType.SIGNUP and "max_claims_per_item" in config:
        max_claims = config["max_claims_per_item"]
        # bool is an int subclass, reject it explicitly
        if isinstance(max_claims, bool) or not isinstance(max_claims, int) or max_claims < 1:
            issues.append(
                _schema_issue(f"{prefix}: Max claims per item must be a positive whole number")
            )
    if field_type == FieldType.POLL and "multi_select" in config:
        if not isinstance(config["multi_select"], bool):
            issues.append(_schema_issue(f"{prefix}: Multi-select must be true or false"))
    return issues


def validate_field_definitions(drafts: Any) -> ValidationResult:
    """Validate the complete set of field definitions submitted for an event."""
    if not isinstance(drafts, (list, tuple)):
        return ValidationResult(issues=[_schema_issue("Fields must be an array")])

    issues: list[ValidationIssue] = []
    if len(drafts) > MAX_CUSTOM_FIELDS_PER_EVENT:
        issues.append(_schema_issue(f"Maximum {MAX_CUSTOM_FIELDS_PER_EVENT} fields per event"))

    for index, draft in enumerate(drafts, start=1):
        prefix = f"Field {index}"
        if not isinstance(draft, Mapping):
            issues.append(_schema_issue(f"{prefix}: Definition must be an object"))
            continue

        field_type = None
        raw_type = draft.get("type")
        if not raw_type or not isinstance(raw_type, str):
            issues.append(_schema_issue(f"{prefix}: Type is required"))
        else:
            try:
                field_type = FieldType(raw_type)
            except ValueError:
                issues.append(_schema_issue(f"{prefix}: Type must be {FIELD_TYPE_CHOICES}"))

        label = draft.get("label")
        if not isinstance(label, str) or not label.strip():
            issues.append(_schema_issue(f"{prefix}: Label is required"))
        elif len(label) > MAX_LABEL_LENGTH:
            issues.append(
                _schema_issue(f"{prefix}: Label must be {MAX_LABEL_LENGTH} characters or less")
            )

        if field_type is not None and field_type.has_options:
            issues.extend(_check_options(prefix, field_type, draft.get("options")))

        issues.extend(_check_config(prefix, field_type, draft.get("config")))

    return ValidationResult(issues=issues)


# ---------------------------------------------------------------------------
# Guest answers
# ---------------------------------------------------------------------------


def _normalize_selection(
    custom_field: CustomFieldDTO, value: str
) -> tuple[tuple[str, ...], list[ValidationIssue]]:
    lookup = option_lookup(custom_field.options)
    selected: list[str] = []
    issues = []
    for token in split_selection(value):
        canonical = lookup.get(token.lower())
        if canonical is None:
            issues.append(
                ValidationIssue(
                    kind=IssueKind.INVALID_OPTION,
                    message=f'{custom_field.label}: "{token}" is not a valid option',
                    field_label=custom_field.label,
                    option=token,
                )
            )
        elif canonical not in selected:
            selected.append(canonical)

    if custom_field.type == FieldType.POLL and not custom_field.multi_select and len(selected) > 1:
        issues.append(
            ValidationIssue(
                kind=IssueKind.INVALID_VALUE,
                message=f"{custom_field.label}: Only one option may be selected",
                field_label=custom_field.label,
            )
        )
    return tuple(selected), issues


def validate_responses(
    responses: Any, fields: Sequence[CustomFieldDTO]
) -> tuple[ValidationResult, list[NormalizedResponseDTO]]:
    """Validate a guest's answers against the event's field definitions.

    Returns the accumulated issues together with the normalized answers. The
    normalized list is only meant to be persisted when the result is valid.

    Required fields are only enforced when at least one answer was submitted;
    an empty submission (e.g. a guest declining) skips them entirely.
    """
    if not isinstance(responses, (list, tuple)):
        return ValidationResult(issues=[_schema_issue("Responses must be an array")]), []

    fields_by_id = {custom_field.id: custom_field for custom_field in fields}
    issues: list[ValidationIssue] = []

    if responses:
        submitted: dict[UUID, Any] = {}
        for response in responses:
            if not isinstance(response, Mapping):
                continue
            field_id = parse_uuid(response.get("field_id"))
            if field_id is not None and field_id not in submitted:
                submitted[field_id] = response.get("value")

        for custom_field in fields:
            if custom_field.required and _is_blank(submitted.get(custom_field.id)):
                issues.append(
                    ValidationIssue(
                        kind=IssueKind.MISSING_REQUIRED,
                        message=f"{custom_field.label}: This field is required",
                        field_label=custom_field.label,
                    )
                )

    normalized: list[NormalizedResponseDTO] = []
    seen: set[UUID] = set()
    for response in responses:
        if not isinstance(response, Mapping):
            issues.append(
                ValidationIssue(kind=IssueKind.INVALID_VALUE, message="Response must be an object")
            )
            continue

        raw_field_id = response.get("field_id")
        if not raw_field_id or not isinstance(raw_field_id, (str, UUID)):
            issues.append(
                ValidationIssue(kind=IssueKind.UNKNOWN_FIELD, message="Response missing field_id")
            )
            continue

        field_id = parse_uuid(raw_field_id)
        custom_field = fields_by_id.get(field_id) if field_id is not None else None
        if custom_field is None:
            issues.append(
                ValidationIssue(
                    kind=IssueKind.UNKNOWN_FIELD,
                    message=f"Response references unknown field: {raw_field_id}",
                )
            )
            continue

        if custom_field.id in seen:
            issues.append(
                ValidationIssue(
                    kind=IssueKind.DUPLICATE_RESPONSE,
                    message=f"{custom_field.label}: Multiple responses submitted for this field",
                    field_label=custom_field.label,
                )
            )
            continue
        seen.add(custom_field.id)

        value = response.get("value")
        if _is_blank(value):
            # an empty answer clears whatever the guest said before
            normalized.append(
                NormalizedResponseDTO(field_id=custom_field.id, field_type=custom_field.type, value="")
            )
            continue

        if not isinstance(value, str):
            issues.append(
                ValidationIssue(
                    kind=IssueKind.INVALID_VALUE,
                    message=f"{custom_field.label}: Value must be a string",
                    field_label=custom_field.label,
                )
            )
            continue

        if custom_field.type == FieldType.TEXT:
            if len(value) > MAX_TEXT_RESPONSE_LENGTH:
                issues.append(
                    ValidationIssue(
                        kind=IssueKind.TOO_LONG,
                        message=(
                            f"{custom_field.label}: Response must be "
                            f"{MAX_TEXT_RESPONSE_LENGTH} characters or less"
                        ),
                        field_label=custom_field.label,
                    )
                )
                continue
            normalized.append(
                NormalizedResponseDTO(field_id=custom_field.id, field_type=custom_field.type, value=value)
            )
        elif custom_field.type in (FieldType.POLL, FieldType.SIGNUP):
            selected, selection_issues = _normalize_selection(custom_field, value)
            if selection_issues:
                issues.extend(selection_issues)
                continue
            normalized.append(
                NormalizedResponseDTO(
                    field_id=custom_field.id,
                    field_type=custom_field.type,
                    value=OPTION_SEPARATOR.join(selected),
                    selected=selected,
                )
            )
        else:
            raise AssertionError(f"Unhandled field type: {custom_field.type}")

    return ValidationResult(issues=issues), normalized
