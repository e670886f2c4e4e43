from uuid import uuid4

import pytest

from src.custom_fields.dtos import FieldType
from src.custom_fields.features.sync_fields.router import get_custom_field_write_model
from src.custom_fields.tests.inmemory_models import InMemoryCustomFieldWriteModel, InMemoryStore
from src.custom_fields.urls import SYNC_CUSTOM_FIELDS_URL


@pytest.fixture
def store():
    return InMemoryStore()


def overrides_for(store):
    return {get_custom_field_write_model: lambda: InMemoryCustomFieldWriteModel(store)}


async def test_sync_creates_fields(client_factory, store):
    event_id = store.add_event()
    payload = {
        "fields": [
            {"type": "text", "label": "Song request"},
            {"type": "signup", "label": "Bring", "options": ["Chips", "Salad"]},
        ]
    }

    async with client_factory(overrides_for(store)) as client:
        response = await client.put(SYNC_CUSTOM_FIELDS_URL.format(event_id=event_id), json=payload)

    assert response.status_code == 200
    data = response.json()
    assert data["valid"] is True
    assert [f["label"] for f in data["fields"]] == ["Song request", "Bring"]
    assert data["fields"][1]["options"] == ["Chips", "Salad"]
    assert data["fields"][1]["sort_order"] == 1


async def test_sync_updates_and_removes(client_factory, store):
    event_id = store.add_event()
    kept = store.add_field(event_id, FieldType.TEXT, "Song request")
    store.add_field(event_id, FieldType.TEXT, "Old question")
    payload = {"fields": [{"id": str(kept.id), "type": "text", "label": "Favourite song"}]}

    async with client_factory(overrides_for(store)) as client:
        response = await client.put(SYNC_CUSTOM_FIELDS_URL.format(event_id=event_id), json=payload)

    assert response.status_code == 200
    fields = response.json()["fields"]
    assert len(fields) == 1
    assert fields[0]["id"] == str(kept.id)
    assert fields[0]["label"] == "Favourite song"


async def test_sync_invalid_definitions(client_factory, store):
    event_id = store.add_event()
    payload = {
        "fields": [
            {"type": "poll", "label": "Pick one", "options": ["Only"]},
            {"type": "checkbox", "label": ""},
        ]
    }

    async with client_factory(overrides_for(store)) as client:
        response = await client.put(SYNC_CUSTOM_FIELDS_URL.format(event_id=event_id), json=payload)

    assert response.status_code == 400
    errors = response.json()["errors"]
    assert "Field 1: At least 2 options are required" in errors
    assert "Field 2: Type must be 'text', 'poll', or 'signup'" in errors
    assert "Field 2: Label is required" in errors
    assert store.fields == {}


async def test_sync_fields_not_an_array(client_factory, store):
    event_id = store.add_event()

    async with client_factory(overrides_for(store)) as client:
        response = await client.put(
            SYNC_CUSTOM_FIELDS_URL.format(event_id=event_id), json={"fields": {"type": "text"}}
        )

    assert response.status_code == 400
    assert response.json() == {"valid": False, "errors": ["Fields must be an array"]}


async def test_sync_unknown_event(client_factory, store):
    async with client_factory(overrides_for(store)) as client:
        response = await client.put(
            SYNC_CUSTOM_FIELDS_URL.format(event_id=uuid4()), json={"fields": []}
        )

    assert response.status_code == 404
