# companion_app/api/endpoints/category.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from companion_app.core.database import get_db
from companion_app.schemas.companion import CategoryRead
from companion_app.services.category_service import CategoryService

router = APIRouter()

@router.get("", response_model=List[CategoryRead], summary="List Categories")
async def list_categories(db: AsyncSession = Depends(get_db)):
    """Categories a companion can be filed under, by name."""
    categories = await CategoryService(db).list()
    return [CategoryRead.model_validate(c) for c in categories]
