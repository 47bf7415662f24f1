# companion_app/api/endpoints/health.py
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter()

@router.get("", response_class=PlainTextResponse)
async def health():
    return "OK"
