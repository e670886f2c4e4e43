from uuid import uuid4

from src.custom_fields.aggregation import (
    build_poll_result,
    build_private_results,
    build_public_results,
    build_signup_result,
)
from src.custom_fields.dtos import CustomFieldDTO, CustomResponseDTO, FieldType

EVENT_ID = uuid4()


def make_field(field_type, label, sort_order=0, **kwargs):
    return CustomFieldDTO(
        id=uuid4(), event_id=EVENT_ID, type=field_type, label=label, sort_order=sort_order, **kwargs
    )


def answer(custom_field, value, guest_name=None):
    return CustomResponseDTO(
        id=uuid4(), field_id=custom_field.id, guest_id=uuid4(), value=value, guest_name=guest_name
    )


def test_poll_counts_respondents_not_selections():
    days = make_field(FieldType.POLL, "Which days?", options=["Fri", "Sat", "Sun"], config={"multi_select": True})
    responses = [answer(days, "Fri, Sat"), answer(days, "sat"), answer(days, ""), answer(days, "Mon")]

    result = build_poll_result(days, responses)

    assert result.votes == {"Fri": 1, "Sat": 2, "Sun": 0}
    assert result.total_votes == 2
    assert result.multi_select is True


def test_signup_remaining_and_full():
    bring = make_field(FieldType.SIGNUP, "Bring", options=["A", "B"], config={"max_claims_per_item": 2})
    responses = [answer(bring, "A", "Ana"), answer(bring, "a, b", None), answer(bring, "A", "Cat")]

    result = build_signup_result(bring, responses, include_claimants=True)

    assert result.claims == {"A": 3, "B": 1}
    # grandfathered over-claims never go negative
    assert result.remaining == {"A": 0, "B": 1}
    assert result.full == {"A": True, "B": False}
    assert result.claimant_names == {"A": ["Ana", "Unknown Guest", "Cat"], "B": ["Unknown Guest"]}


def test_signup_without_claimants():
    bring = make_field(FieldType.SIGNUP, "Bring", options=["A", "B"])

    result = build_signup_result(bring, [answer(bring, "A", "Ana")])

    assert result.claimant_names is None
    assert result.full == {"A": True, "B": False}


def test_public_results_exclude_text():
    song = make_field(FieldType.TEXT, "Song request", sort_order=0)
    bring = make_field(FieldType.SIGNUP, "Bring", sort_order=2, options=["A", "B"])
    days = make_field(FieldType.POLL, "Which days?", sort_order=1, options=["Fri", "Sat"])
    responses = [answer(song, "Jolene", "Ana"), answer(bring, "A", "Ana"), answer(days, "Fri", "Ana")]

    results = build_public_results([bring, song, days], responses)

    assert [p.label for p in results.polls] == ["Which days?"]
    assert [s.label for s in results.signups] == ["Bring"]
    assert results.signups[0].claimant_names is None


def test_private_results_in_sort_order():
    second = make_field(FieldType.TEXT, "Second", sort_order=1)
    first = make_field(FieldType.TEXT, "First", sort_order=0)
    responses = [answer(second, "b", "Ben"), answer(first, "a", "Ana"), answer(first, "  ", "Cat")]

    results = build_private_results([second, first], responses)

    assert [t.label for t in results.texts] == ["First", "Second"]
    assert [(a.guest_name, a.value) for a in results.texts[0].answers] == [("Ana", "a")]
