# companion_app/client/api_client.py
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional
import httpx
from loguru import logger


class APIError(Exception):
    """A non-2xx answer from the companion API; `message` is the plain-text body."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class CompanionAPIClient:
    """
    Async client for the companion HTTP API, used by the form controllers.
    No timeout policy of its own beyond httpx's.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url, headers=headers, transport=transport, timeout=timeout
        )

    async def aclose(self):
        await self._client.aclose()

    async def __aenter__(self) -> "CompanionAPIClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    @staticmethod
    async def _raise_for_status(response: httpx.Response):
        if response.is_error:
            await response.aread()
            message = response.text or response.reason_phrase
            logger.debug(f"{response.request.method} {response.request.url} -> {response.status_code}: {message}")
            raise APIError(response.status_code, message)

    async def create_companion(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        response = await self._client.post("/api/companion", json=dict(values))
        await self._raise_for_status(response)
        return response.json()

    async def update_companion(self, companion_id: str, values: Mapping[str, Any]) -> Dict[str, Any]:
        response = await self._client.patch(f"/api/companion/{companion_id}", json=dict(values))
        await self._raise_for_status(response)
        return response.json()

    async def list_categories(self) -> List[Dict[str, Any]]:
        response = await self._client.get("/api/category")
        await self._raise_for_status(response)
        return response.json()

    async def get_chat_history(self, companion_id: str) -> List[Dict[str, Any]]:
        response = await self._client.get(f"/api/chat/{companion_id}")
        await self._raise_for_status(response)
        return response.json()

    async def stream_chat(self, companion_id: str, prompt: str) -> AsyncIterator[str]:
        """Yields the companion's reply as it arrives."""
        async with self._client.stream("POST", f"/api/chat/{companion_id}", json={"prompt": prompt}) as response:
            await self._raise_for_status(response)
            async for text in response.aiter_text():
                if text:
                    yield text
