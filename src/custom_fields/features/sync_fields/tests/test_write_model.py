"""Tests for SqlCustomFieldWriteModel."""

from uuid import uuid4

from sqlalchemy import func, select

from src.config.database import async_session_maker
from src.custom_fields.dtos import FieldType
from src.custom_fields.features.submit_responses.write_model import SqlCustomResponseWriteModel
from src.custom_fields.features.sync_fields.write_model import SqlCustomFieldWriteModel
from src.custom_fields.repository.orm_models import CustomFieldResponse, SignupClaim


async def count_rows(model):
    async with async_session_maker() as session:
        return await session.scalar(select(func.count()).select_from(model))


async def test_sync_inserts_new_fields(event):
    write_model = SqlCustomFieldWriteModel()

    result = await write_model.sync_fields(
        event.uuid,
        [
            {"type": "text", "label": "  Song request  ", "required": True},
            {
                "type": "poll",
                "label": "Which days?",
                "options": [" Fri", "Sat "],
                "config": {"multi_select": True},
            },
        ],
    )

    assert result.valid
    song, days = result.fields
    assert song.type == FieldType.TEXT
    assert song.label == "Song request"
    assert song.required is True
    assert song.options is None
    assert days.options == ["Fri", "Sat"]
    assert days.multi_select is True
    assert [f.sort_order for f in result.fields] == [0, 1]
    assert all(f.event_id == event.uuid for f in result.fields)


async def test_sync_updates_matching_and_deletes_missing(event, make_guest):
    write_model = SqlCustomFieldWriteModel()
    song, old = (
        await write_model.sync_fields(
            event.uuid,
            [{"type": "text", "label": "Song request"}, {"type": "text", "label": "Old question"}],
        )
    ).fields
    guest = await make_guest("Ana")
    await SqlCustomResponseWriteModel().submit_responses(
        guest,
        [{"field_id": str(song.id), "value": "Jolene"}, {"field_id": str(old.id), "value": "yes"}],
    )

    result = await write_model.sync_fields(
        event.uuid,
        [
            {"type": "text", "label": "Brand new", "sort_order": 0},
            {"id": str(song.id), "type": "text", "label": "Favourite song", "sort_order": 1},
        ],
    )

    assert result.valid
    assert [f.label for f in result.fields] == ["Brand new", "Favourite song"]
    assert result.fields[1].id == song.id
    assert old.id not in {f.id for f in result.fields}
    # answers to the removed question are gone, the kept one survives
    assert await count_rows(CustomFieldResponse) == 1


async def test_sync_foreign_id_is_inserted(event, make_event):
    other_event = await make_event(slug="other-party")
    (foreign,) = (
        await SqlCustomFieldWriteModel().sync_fields(
            other_event.uuid, [{"type": "text", "label": "Theirs"}]
        )
    ).fields

    result = await SqlCustomFieldWriteModel().sync_fields(
        event.uuid, [{"id": str(foreign.id), "type": "text", "label": "Mine"}]
    )

    assert result.fields[0].id != foreign.id
    assert result.fields[0].event_id == event.uuid


async def test_sync_dropped_signup_option_releases_claims(event, make_guest):
    write_model = SqlCustomFieldWriteModel()
    (bring,) = (
        await write_model.sync_fields(
            event.uuid, [{"type": "signup", "label": "Bring", "options": ["A", "B", "C"]}]
        )
    ).fields
    guest = await make_guest("Ana")
    await SqlCustomResponseWriteModel().submit_responses(
        guest, [{"field_id": str(bring.id), "value": "A, C"}]
    )

    await write_model.sync_fields(
        event.uuid,
        [{"id": str(bring.id), "type": "signup", "label": "Bring", "options": ["A", "B"]}],
    )

    async with async_session_maker() as session:
        options = (await session.execute(select(SignupClaim.option))).scalars().all()
    assert options == ["A"]


async def test_sync_invalid_writes_nothing(event):
    result = await SqlCustomFieldWriteModel().sync_fields(
        event.uuid, [{"type": "signup", "label": "Bring", "options": ["A", "a"]}]
    )

    assert not result.valid
    assert result.errors == ["Field 1: Duplicate options are not allowed"]
    assert result.fields == []


async def test_sync_unknown_event():
    assert await SqlCustomFieldWriteModel().sync_fields(uuid4(), []) is None


async def test_sync_empty_list_removes_everything(event):
    write_model = SqlCustomFieldWriteModel()
    await write_model.sync_fields(event.uuid, [{"type": "text", "label": "Song request"}])

    result = await write_model.sync_fields(event.uuid, [])

    assert result.valid
    assert result.fields == []


async def claim_rows(field_id):
    async with async_session_maker() as session:
        result = await session.execute(
            select(SignupClaim.option, SignupClaim.guest_id).where(SignupClaim.field_id == field_id)
        )
        return sorted(result.all())


async def test_sync_poll_to_signup_counts_existing_answers(event, make_guest):
    write_model = SqlCustomFieldWriteModel()
    (bring,) = (
        await write_model.sync_fields(
            event.uuid, [{"type": "poll", "label": "Bring", "options": ["A", "B"]}]
        )
    ).fields
    ana, ben, cat = await make_guest("Ana"), await make_guest("Ben"), await make_guest("Cat")
    responses = SqlCustomResponseWriteModel()
    for guest in (ana, ben):
        saved = await responses.submit_responses(guest, [{"field_id": str(bring.id), "value": "A"}])
        assert saved.valid

    result = await write_model.sync_fields(
        event.uuid,
        [
            {
                "id": str(bring.id),
                "type": "signup",
                "label": "Bring",
                "options": ["A", "B"],
                "config": {"max_claims_per_item": 1},
            }
        ],
    )
    assert result.valid
    assert [option for option, _ in await claim_rows(bring.id)] == ["A", "A"]

    late = await responses.submit_responses(cat, [{"field_id": str(bring.id), "value": "A"}])
    assert not late.valid
    assert late.errors == ['Bring: "A" is fully claimed']
    other = await responses.submit_responses(cat, [{"field_id": str(bring.id), "value": "B"}])
    assert other.valid


async def test_sync_text_to_signup_ignores_unrelated_answers(event, make_guest):
    write_model = SqlCustomFieldWriteModel()
    (bring,) = (
        await write_model.sync_fields(event.uuid, [{"type": "text", "label": "Bring"}])
    ).fields
    guest = await make_guest("Ana")
    await SqlCustomResponseWriteModel().submit_responses(
        guest, [{"field_id": str(bring.id), "value": "a, Pie"}]
    )

    await write_model.sync_fields(
        event.uuid,
        [{"id": str(bring.id), "type": "signup", "label": "Bring", "options": ["A", "B"]}],
    )

    assert await claim_rows(bring.id) == [("A", guest.id)]


async def test_sync_readded_option_claims_again(event, make_guest):
    write_model = SqlCustomFieldWriteModel()
    definition = {"type": "signup", "label": "Bring", "options": ["A", "B"]}
    (bring,) = (await write_model.sync_fields(event.uuid, [definition])).fields
    ana, ben = await make_guest("Ana"), await make_guest("Ben")
    responses = SqlCustomResponseWriteModel()
    await responses.submit_responses(ana, [{"field_id": str(bring.id), "value": "B"}])

    await write_model.sync_fields(
        event.uuid, [{**definition, "id": str(bring.id), "options": ["A"]}]
    )
    assert await claim_rows(bring.id) == []

    await write_model.sync_fields(event.uuid, [{**definition, "id": str(bring.id)}])
    assert await claim_rows(bring.id) == [("B", ana.id)]

    taken = await responses.submit_responses(ben, [{"field_id": str(bring.id), "value": "B"}])
    assert taken.errors == ['Bring: "B" is fully claimed']


async def test_sync_signup_to_poll_releases_claims(event, make_guest):
    write_model = SqlCustomFieldWriteModel()
    definition = {"type": "signup", "label": "Bring", "options": ["A", "B"]}
    (bring,) = (await write_model.sync_fields(event.uuid, [definition])).fields
    guest = await make_guest("Ana")
    await SqlCustomResponseWriteModel().submit_responses(
        guest, [{"field_id": str(bring.id), "value": "A"}]
    )

    await write_model.sync_fields(
        event.uuid, [{**definition, "id": str(bring.id), "type": "poll"}]
    )

    assert await claim_rows(bring.id) == []
    assert await count_rows(CustomFieldResponse) == 1
