# companion_app/api/router.py
from fastapi import APIRouter
from companion_app.api.endpoints import companion, category, chat
from companion_app.api.endpoints import health as health_endpoint

api_router = APIRouter()

# Companion and chat routes resolve the caller themselves so the auth check
# runs before body validation, in a fixed order.
api_router.include_router(companion.router, prefix="/companion", tags=["Companion"])
api_router.include_router(chat.router, prefix="/chat", tags=["Chat"])

# --- Public Routes ---
api_router.include_router(category.router, prefix="/category", tags=["Category"])
api_router.include_router(health_endpoint.router, prefix="/health", tags=["Health"])
