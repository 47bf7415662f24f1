# tests/integration/test_client_end_to_end.py
"""The client form controllers driving the real API in-process."""

import httpx
import pytest

from companion_app.client.api_client import CompanionAPIClient
from companion_app.client.chat_form import ChatFormController
from companion_app.client.companion_form import CompanionFormController, FormStatus
from tests.conftest import INSTRUCTIONS, SEED


@pytest.fixture
async def api(app, make_token):
    client = CompanionAPIClient(
        base_url="http://test", token=make_token(), transport=httpx.ASGITransport(app=app)
    )
    yield client
    await client.aclose()


class TestCompanionFormEndToEnd:

    async def test_create_then_edit(self, api, categories):
        controller = CompanionFormController(api)
        controller.change("name", "Milo")
        controller.change("description", "A curious fox")
        controller.change("instructions", INSTRUCTIONS)
        controller.change("seed", SEED)
        controller.change("src", "/img/milo.png")
        controller.change("categoryID", categories[0].id)

        created = await controller.submit()

        assert created.submit_error is None
        assert created.saved["userName"] == "Alice"
        companion_id = created.companion_id
        assert companion_id

        controller.change("description", "A very curious fox")
        edited = await controller.submit()

        assert edited.status == FormStatus.IDLE
        assert edited.companion_id == companion_id
        assert edited.saved["description"] == "A very curious fox"

    async def test_category_list_feeds_the_form(self, api, categories):
        assert [c["name"] for c in await api.list_categories()] == ["Animals", "Cartoons"]


class TestChatFormEndToEnd:

    async def test_chat_round_trip(self, api, async_client, auth_headers, valid_values):
        companion = (await async_client.post("/api/companion", json=valid_values, headers=auth_headers)).json()
        controller = ChatFormController(api, companion_id=companion["id"])

        controller.handle_input_change("Hi Milo!")
        state = await controller.submit()

        assert state.error is None
        assert state.messages[-1].content == "Hello there, friend!"

        reloaded = ChatFormController(api, companion_id=companion["id"])
        history = await reloaded.load_history()
        assert [m.content for m in history.messages] == ["Hi Milo!", "Hello there, friend!"]
