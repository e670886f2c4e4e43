"""Read views over stored answers.

The host view carries everything including who answered what. The public
view drops identities and never includes text fields.
"""

from collections.abc import Iterable, Sequence

from src.custom_fields.dtos import (
    CustomFieldDTO,
    CustomResponseDTO,
    FieldType,
    PollResultDTO,
    PrivateResultsDTO,
    PublicResultsDTO,
    SignupResultDTO,
    TextAnswerDTO,
    TextResultDTO,
)
from src.custom_fields.validators import option_lookup, split_selection

UNKNOWN_GUEST_NAME = "Unknown Guest"


def _selections(
    custom_field: CustomFieldDTO, responses: Iterable[CustomResponseDTO]
) -> list[tuple[CustomResponseDTO, list[str]]]:
    """Pair every answer to the field with the defined options it selects."""
    lookup = option_lookup(custom_field.options)
    selections = []
    for response in responses:
        if response.field_id != custom_field.id:
            continue
        selected: list[str] = []
        for token in split_selection(response.value):
            canonical = lookup.get(token.lower())
            if canonical is not None and canonical not in selected:
                selected.append(canonical)
        if selected:
            selections.append((response, selected))
    return selections


def build_poll_result(
    custom_field: CustomFieldDTO, responses: Iterable[CustomResponseDTO]
) -> PollResultDTO:
    options = list(custom_field.options or [])
    votes = {option: 0 for option in options}
    respondents = set()
    for response, selected in _selections(custom_field, responses):
        respondents.add(response.guest_id)
        for option in selected:
            votes[option] += 1

    return PollResultDTO(
        field_id=custom_field.id,
        label=custom_field.label,
        description=custom_field.description,
        options=options,
        multi_select=custom_field.multi_select,
        votes=votes,
        # distinct guests, not summed selections
        total_votes=len(respondents),
    )


def build_signup_result(
    custom_field: CustomFieldDTO,
    responses: Iterable[CustomResponseDTO],
    include_claimants: bool = False,
) -> SignupResultDTO:
    options = list(custom_field.options or [])
    limit = custom_field.max_claims_per_item
    claimants: dict[str, list[str]] = {option: [] for option in options}
    holders: dict[str, set] = {option: set() for option in options}
    for response, selected in _selections(custom_field, responses):
        for option in selected:
            if response.guest_id in holders[option]:
                continue
            holders[option].add(response.guest_id)
            claimants[option].append(response.guest_name or UNKNOWN_GUEST_NAME)

    claims = {option: len(holders[option]) for option in options}
    return SignupResultDTO(
        field_id=custom_field.id,
        label=custom_field.label,
        description=custom_field.description,
        options=options,
        max_claims_per_item=limit,
        claims=claims,
        remaining={option: max(limit - count, 0) for option, count in claims.items()},
        full={option: count >= limit for option, count in claims.items()},
        claimant_names=claimants if include_claimants else None,
    )


def build_text_result(
    custom_field: CustomFieldDTO, responses: Iterable[CustomResponseDTO]
) -> TextResultDTO:
    answers = [
        TextAnswerDTO(guest_name=response.guest_name or UNKNOWN_GUEST_NAME, value=response.value)
        for response in responses
        if response.field_id == custom_field.id and response.value.strip()
    ]
    return TextResultDTO(
        field_id=custom_field.id,
        label=custom_field.label,
        description=custom_field.description,
        answers=answers,
    )


def _ordered(fields: Sequence[CustomFieldDTO]) -> list[CustomFieldDTO]:
    return sorted(fields, key=lambda custom_field: custom_field.sort_order)


def build_private_results(
    fields: Sequence[CustomFieldDTO], responses: Sequence[CustomResponseDTO]
) -> PrivateResultsDTO:
    """Host dashboard view: tallies, claimant names and every text answer."""
    results = PrivateResultsDTO()
    for custom_field in _ordered(fields):
        if custom_field.type == FieldType.POLL:
            results.polls.append(build_poll_result(custom_field, responses))
        elif custom_field.type == FieldType.SIGNUP:
            results.signups.append(
                build_signup_result(custom_field, responses, include_claimants=True)
            )
        elif custom_field.type == FieldType.TEXT:
            results.texts.append(build_text_result(custom_field, responses))
        else:
            raise AssertionError(f"Unhandled field type: {custom_field.type}")
    return results


def build_public_results(
    fields: Sequence[CustomFieldDTO], responses: Sequence[CustomResponseDTO]
) -> PublicResultsDTO:
    """Unauthenticated event page view: counts and availability only."""
    results = PublicResultsDTO()
    for custom_field in _ordered(fields):
        if custom_field.type == FieldType.POLL:
            results.polls.append(build_poll_result(custom_field, responses))
        elif custom_field.type == FieldType.SIGNUP:
            results.signups.append(build_signup_result(custom_field, responses))
        elif custom_field.type == FieldType.TEXT:
            # text answers are host-only
            continue
        else:
            raise AssertionError(f"Unhandled field type: {custom_field.type}")
    return results
