"""Capacity rules for signup fields.

A claim is one guest holding one option of a signup field. No option may be
held by more distinct guests than the field's ``max_claims_per_item``.

The functions here are pure: they decide, they never read or write. The SQL
write model calls them inside the transaction that holds the field's row lock,
with counts it has just read, so the decision and the write cannot interleave
with another submission for the same field.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from uuid import UUID

from src.custom_fields.constants import FULLY_CLAIMED
from src.custom_fields.dtos import (
    CustomFieldDTO,
    CustomResponseDTO,
    FieldType,
    IssueKind,
    ValidationIssue,
)
from src.custom_fields.validators import option_lookup, split_selection


def find_capacity_issues(
    custom_field: CustomFieldDTO,
    selected: Iterable[str],
    claims_by_others: Mapping[str, int],
) -> list[ValidationIssue]:
    """Return one issue per selected option that other guests already filled.

    ``claims_by_others`` must exclude the submitting guest, so a guest can
    re-confirm or keep an option they already hold even when it is full.
    """
    if custom_field.type != FieldType.SIGNUP:
        return []

    limit = custom_field.max_claims_per_item
    issues = []
    for option in selected:
        if claims_by_others.get(option, 0) >= limit:
            issues.append(
                ValidationIssue(
                    kind=IssueKind.CAPACITY,
                    message=f'{custom_field.label}: "{option}" is {FULLY_CLAIMED}',
                    field_label=custom_field.label,
                    option=option,
                )
            )
    return issues


def tally_claims(
    custom_field: CustomFieldDTO,
    responses: Iterable[CustomResponseDTO],
    exclude_guest_id: UUID | None = None,
) -> dict[str, int]:
    """Count distinct guests per option from stored answers.

    Tokens are matched case-insensitively; keys use the defined spelling and
    every option is present, zero when unclaimed.
    """
    lookup = option_lookup(custom_field.options)
    holders: dict[str, set[UUID]] = defaultdict(set)
    for response in responses:
        if response.field_id != custom_field.id or response.guest_id == exclude_guest_id:
            continue
        for token in split_selection(response.value):
            canonical = lookup.get(token.lower())
            if canonical is not None:
                holders[canonical].add(response.guest_id)
    return {option: len(holders[option]) for option in custom_field.options or []}
