# tests/unit/test_chat_form.py
"""Tests for the chat form state machine and its controller."""

import json

import httpx

from companion_app.client.api_client import CompanionAPIClient
from companion_app.client.chat_form import (
    ChatFormController,
    ChatFormState,
    ChatMessage,
    InputChanged,
    PromptSubmitted,
    ReplyChunkReceived,
    ReplyCompleted,
    ReplyFailed,
    reduce,
)


def _controller(handler):
    api = CompanionAPIClient(base_url="http://test", token="t", transport=httpx.MockTransport(handler))
    return ChatFormController(api, companion_id="comp_1")


class TestReducer:

    def test_prompt_adds_user_message_and_empty_reply(self):
        state = reduce(ChatFormState(input="hi"), PromptSubmitted(prompt="hi"))

        assert state.is_loading
        assert state.input == ""
        assert state.messages == (
            ChatMessage(role="user", content="hi"),
            ChatMessage(role="system", content=""),
        )

    def test_chunks_build_the_reply(self):
        state = reduce(ChatFormState(), PromptSubmitted(prompt="hi"))
        state = reduce(state, ReplyChunkReceived(text="Hel"))
        state = reduce(state, ReplyChunkReceived(text="lo"))
        state = reduce(state, ReplyCompleted())

        assert state.messages[-1].content == "Hello"
        assert not state.is_loading

    def test_input_ignored_while_loading(self):
        state = reduce(ChatFormState(), PromptSubmitted(prompt="hi"))

        assert reduce(state, InputChanged(value="more")) is state

    def test_failure_restores_prompt_and_drops_empty_reply(self):
        state = reduce(ChatFormState(), PromptSubmitted(prompt="hi"))
        state = reduce(state, ReplyFailed(prompt="hi", message="Companion not found"))

        assert state.messages == (ChatMessage(role="user", content="hi"),)
        assert state.input == "hi"
        assert state.error == "Companion not found"
        assert not state.is_loading


class TestController:

    async def test_streamed_reply(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, text="Hello there!")

        controller = _controller(handler)
        controller.handle_input_change("Hi Milo")

        state = await controller.submit()

        assert seen[0].url.path == "/api/chat/comp_1"
        assert json.loads(seen[0].content) == {"prompt": "Hi Milo"}
        assert [m.content for m in state.messages] == ["Hi Milo", "Hello there!"]
        assert not state.is_loading

    async def test_blank_input_sends_nothing(self):
        seen = []
        controller = _controller(lambda request: seen.append(request) or httpx.Response(200))
        controller.handle_input_change("   ")

        await controller.submit()

        assert seen == []

    async def test_error_is_surfaced(self):
        controller = _controller(lambda request: httpx.Response(404, text="Companion not found"))
        controller.handle_input_change("Hi")

        state = await controller.submit()

        assert state.error == "Companion not found"
        assert state.input == "Hi"

    async def test_unexpected_failure_returns_to_idle(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise RuntimeError("stream broke")
            return httpx.Response(200, text="Hello again!")

        controller = _controller(handler)
        controller.handle_input_change("Hi")

        state = await controller.submit()

        assert not state.is_loading
        assert state.error == "Something went wrong. Please try again."
        assert state.input == "Hi"

        state = await controller.submit()
        assert state.messages[-1].content == "Hello again!"
        assert not state.is_loading

    async def test_load_history(self):
        records = [
            {"id": "m1", "role": "user", "content": "Hi", "companionId": "comp_1", "userId": "u"},
            {"id": "m2", "role": "system", "content": "Hello!", "companionId": "comp_1", "userId": "u"},
        ]
        controller = _controller(lambda request: httpx.Response(200, json=records))

        state = await controller.load_history()

        assert [m.role for m in state.messages] == ["user", "system"]
