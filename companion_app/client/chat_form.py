# companion_app/client/chat_form.py
from typing import Any, Dict, List, Optional, Tuple, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict

from companion_app.client.api_client import APIError, CompanionAPIClient
from companion_app.client.companion_form import GENERIC_SUBMIT_ERROR


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)
    role: str
    content: str


class ChatFormState(BaseModel):
    model_config = ConfigDict(frozen=True)

    input: str = ""
    is_loading: bool = False
    messages: Tuple[ChatMessage, ...] = ()
    error: Optional[str] = None


class InputChanged(BaseModel):
    model_config = ConfigDict(frozen=True)
    value: str


class HistoryLoaded(BaseModel):
    model_config = ConfigDict(frozen=True)
    messages: Tuple[ChatMessage, ...]


class PromptSubmitted(BaseModel):
    model_config = ConfigDict(frozen=True)
    prompt: str


class ReplyChunkReceived(BaseModel):
    model_config = ConfigDict(frozen=True)
    text: str


class ReplyCompleted(BaseModel):
    model_config = ConfigDict(frozen=True)


class ReplyFailed(BaseModel):
    model_config = ConfigDict(frozen=True)
    prompt: str
    message: str


ChatAction = Union[InputChanged, HistoryLoaded, PromptSubmitted, ReplyChunkReceived, ReplyCompleted, ReplyFailed]


def reduce(state: ChatFormState, action: ChatAction) -> ChatFormState:
    if isinstance(action, InputChanged):
        if state.is_loading:
            return state
        return state.model_copy(update={"input": action.value})

    if isinstance(action, HistoryLoaded):
        return state.model_copy(update={"messages": tuple(action.messages)})

    if isinstance(action, PromptSubmitted):
        # the empty system message is filled in by the reply chunks
        messages = state.messages + (
            ChatMessage(role="user", content=action.prompt),
            ChatMessage(role="system", content=""),
        )
        return state.model_copy(update={"messages": messages, "input": "", "is_loading": True, "error": None})

    if isinstance(action, ReplyChunkReceived):
        last = state.messages[-1]
        updated = last.model_copy(update={"content": last.content + action.text})
        return state.model_copy(update={"messages": state.messages[:-1] + (updated,)})

    if isinstance(action, ReplyCompleted):
        return state.model_copy(update={"is_loading": False})

    if isinstance(action, ReplyFailed):
        messages = state.messages
        if messages and messages[-1].role == "system" and not messages[-1].content:
            messages = messages[:-1]
        # give the prompt back so it can be resent
        return state.model_copy(update={
            "messages": messages,
            "is_loading": False,
            "error": action.message,
            "input": action.prompt,
        })

    raise TypeError(f"Unsupported chat action: {type(action).__name__}")


class ChatFormController:
    def __init__(self, api: CompanionAPIClient, companion_id: str):
        self.api = api
        self.companion_id = companion_id
        self.state = ChatFormState()

    def dispatch(self, action: ChatAction) -> ChatFormState:
        self.state = reduce(self.state, action)
        return self.state

    def handle_input_change(self, value: str) -> ChatFormState:
        return self.dispatch(InputChanged(value=value))

    async def load_history(self) -> ChatFormState:
        records: List[Dict[str, Any]] = await self.api.get_chat_history(self.companion_id)
        messages = tuple(ChatMessage(role=r["role"], content=r["content"]) for r in records)
        return self.dispatch(HistoryLoaded(messages=messages))

    async def submit(self) -> ChatFormState:
        """Sends the current input and streams the reply into the last message."""
        prompt = self.state.input
        if self.state.is_loading or not prompt.strip():
            return self.state

        self.dispatch(PromptSubmitted(prompt=prompt))
        try:
            async for text in self.api.stream_chat(self.companion_id, prompt):
                self.dispatch(ReplyChunkReceived(text=text))
        except APIError as e:
            logger.error(f"Chat with companion {self.companion_id} failed: {e}")
            return self.dispatch(ReplyFailed(prompt=prompt, message=e.message))
        except Exception as e:
            logger.error(f"Chat with companion {self.companion_id} failed: {e}")
            return self.dispatch(ReplyFailed(prompt=prompt, message=GENERIC_SUBMIT_ERROR))
        return self.dispatch(ReplyCompleted())
