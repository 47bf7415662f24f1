# companion_app/api/endpoints/body.py
from typing import Any, Dict
from fastapi import Request

from companion_app.core.exceptions import BadRequest


async def read_json_body(request: Request) -> Dict[str, Any]:
    """
    Reads a JSON object body by hand, after the caller dependency has run,
    so an anonymous request with a bad body is still answered with 401.
    An empty body reads as {}.
    """
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = await request.json()
    except ValueError:
        raise BadRequest("Invalid JSON body")
    if not isinstance(body, dict):
        raise BadRequest("Invalid JSON body")
    return body
