# companion_app/api/endpoints/companion.py
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, Query, Request, Response, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from companion_app.api.endpoints.body import read_json_body
from companion_app.core.database import get_db
from companion_app.core.exceptions import BadRequest, CompanionAppError, InternalError
from companion_app.core.security import get_current_caller
from companion_app.models.caller import Caller
from companion_app.schemas.companion import (
    CompanionDetail,
    CompanionPayload,
    CompanionRead,
    CompanionValidationError,
    validate_companion,
)
from companion_app.services.companion_service import CompanionService

router = APIRouter()


def _validated(body: Dict[str, Any]) -> CompanionPayload:
    try:
        return validate_companion(body)
    except CompanionValidationError as e:
        if e.missing:
            raise BadRequest("Missing required fields")
        raise BadRequest(" ".join(e.errors.values()))


@router.post(
    "",
    response_model=CompanionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Companion"
)
async def create_companion(
    request: Request,
    caller: Caller = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db)
):
    """Creates a companion owned by the caller."""
    payload = _validated(await read_json_body(request))
    try:
        db_companion = await CompanionService(db).create(payload, caller)
    except CompanionAppError:
        raise
    except Exception as e:
        logger.error(f"[COMPANION_POST] {e}")
        raise InternalError()
    return CompanionRead.model_validate(db_companion)


@router.get("", response_model=List[CompanionRead], summary="List Companions")
async def list_companions(
    category_id: Optional[str] = Query(None, alias="categoryId"),
    name: Optional[str] = Query(None),
    caller: Caller = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db)
):
    """Lists companions, newest first, filtered by category and/or a name search."""
    companions = await CompanionService(db).list(category_id=category_id, name=name)
    return [CompanionRead.model_validate(c) for c in companions]


@router.get("/{companion_id}", response_model=CompanionDetail, summary="Retrieve Companion by ID")
async def get_companion(
    companion_id: str,
    caller: Caller = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db)
):
    service = CompanionService(db)
    db_companion = await service.get_or_404(companion_id)
    detail = CompanionDetail.model_validate(db_companion)
    detail.message_count = await service.count_messages(companion_id)
    return detail


@router.patch("", summary="Update Companion (missing ID)")
async def update_companion_without_id(
    request: Request,
    caller: Caller = Depends(get_current_caller),
):
    _validated(await read_json_body(request))
    raise BadRequest("Companion ID is required")


@router.patch("/{companion_id}", response_model=CompanionRead, summary="Update Companion by ID")
async def update_companion(
    companion_id: str,
    request: Request,
    caller: Caller = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db)
):
    """
    Overwrites a companion. Checks run in order: caller identity (401),
    body fields (400), companion id (400); then ownership (403) and
    existence (404).
    """
    payload = _validated(await read_json_body(request))
    if not companion_id.strip():
        raise BadRequest("Companion ID is required")
    try:
        db_companion = await CompanionService(db).update(companion_id, payload, caller)
    except CompanionAppError:
        raise
    except Exception as e:
        logger.error(f"[COMPANION_PATCH] {e}")
        raise InternalError()
    return CompanionRead.model_validate(db_companion)


@router.delete("/{companion_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Companion by ID")
async def delete_companion(
    companion_id: str,
    caller: Caller = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db)
):
    try:
        await CompanionService(db).delete(companion_id, caller)
    except CompanionAppError:
        raise
    except Exception as e:
        logger.error(f"[COMPANION_DELETE] {e}")
        raise InternalError()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
