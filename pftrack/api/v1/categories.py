"""
Category API endpoints (read-only; category CRUD is owned elsewhere)
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from pftrack.api.deps import get_db, get_owner_id
from pftrack.infrastructure.recordstore.repository import RecordStoreRepository


router = APIRouter(prefix="/api/v1/categories", tags=["categories"])


class CategoryResponse(BaseModel):
    id: int
    name: str
    type: str


@router.get("", response_model=list[CategoryResponse])
def list_categories(
    owner_id: int = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """Owner's categories ordered by name"""
    categories = RecordStoreRepository(db).list_categories(owner_id)
    return [
        CategoryResponse(id=c.id, name=c.name, type=c.kind)
        for c in categories
    ]
