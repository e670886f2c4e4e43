import pytest

from src.custom_fields.dtos import FieldType
from src.custom_fields.features.get_rsvp_custom_fields.router import get_custom_field_read_model
from src.custom_fields.features.submit_responses.router import get_guest_identity_read_model
from src.custom_fields.tests.inmemory_models import (
    InMemoryCustomFieldReadModel,
    InMemoryCustomResponseWriteModel,
    InMemoryGuestIdentityReadModel,
    InMemoryStore,
)
from src.custom_fields.urls import RSVP_CUSTOM_FIELDS_URL

TOKEN = "rsvp-token-ana"


@pytest.fixture
def store():
    return InMemoryStore()


def overrides_for(store):
    return {
        get_guest_identity_read_model: lambda: InMemoryGuestIdentityReadModel(store),
        get_custom_field_read_model: lambda: InMemoryCustomFieldReadModel(store),
    }


async def test_get_rsvp_custom_fields(client_factory, store):
    """The form gets the questions, the guest's own answers and signup availability."""
    event_id = store.add_event()
    ana = store.add_guest(event_id, "Ana", token=TOKEN)
    ben = store.add_guest(event_id, "Ben")
    song = store.add_field(event_id, FieldType.TEXT, "Song request")
    bring = store.add_field(
        event_id, FieldType.SIGNUP, "Bring", options=["Chips", "Salad"], config={"max_claims_per_item": 2}
    )
    write_model = InMemoryCustomResponseWriteModel(store)
    await write_model.submit_responses(ana, [{"field_id": str(song.id), "value": "Jolene"}])
    await write_model.submit_responses(ben, [{"field_id": str(bring.id), "value": "Chips"}])

    async with client_factory(overrides_for(store)) as client:
        response = await client.get(RSVP_CUSTOM_FIELDS_URL.format(token=TOKEN))

    assert response.status_code == 200
    data = response.json()
    assert [f["label"] for f in data["fields"]] == ["Song request", "Bring"]
    assert [(r["field_id"], r["value"]) for r in data["responses"]] == [(str(song.id), "Jolene")]
    assert data["signup_claims"] == {str(bring.id): {"Chips": 1, "Salad": 0}}


async def test_get_rsvp_custom_fields_unknown_token(client_factory, store):
    async with client_factory(overrides_for(store)) as client:
        response = await client.get(RSVP_CUSTOM_FIELDS_URL.format(token="nope"))

    assert response.status_code == 404
