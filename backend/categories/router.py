# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Category endpoints.

Reads are public (the site navigation is built from them); create, update
and delete require ``require_admin``.
"""

from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from database import get_db
from core import audit
from core.security import require_admin
from core.sessions import SessionEntry
from categories import crud
from categories.schemas import (
    CategoryDetail,
    CategoryRow,
    CategoryTree,
    CreateCategoryRequest,
    UpdateCategoryRequest,
)

router = APIRouter(prefix="/categories", tags=["categories"])


# ---------------------------------------------------------------------------
# Public reads
# ---------------------------------------------------------------------------


@router.get("", response_model=List[CategoryTree])
def list_categories(db: Session = Depends(get_db)):
    """Root categories with their direct children, id ascending."""
    return crud.find_all(db)


@router.get("/root", response_model=List[CategoryTree])
def list_root_categories(db: Session = Depends(get_db)):
    return crud.find_roots(db)


@router.get("/{category_id}/children", response_model=List[CategoryRow])
def list_children(category_id: int, db: Session = Depends(get_db)):
    return crud.find_children(db, category_id)


@router.get("/{category_id}/path", response_model=List[CategoryRow])
def category_path(category_id: int, db: Session = Depends(get_db)):
    """Root-first chain of ancestors ending with the category itself."""
    return crud.get_category_path(db, category_id)


@router.get("/{category_id}", response_model=CategoryDetail)
def get_category(category_id: int, db: Session = Depends(get_db)):
    return crud.find_one(db, category_id)


# ---------------------------------------------------------------------------
# Admin writes
# ---------------------------------------------------------------------------


@router.post("", response_model=CategoryRow, status_code=status.HTTP_201_CREATED)
def create_category(
    body: CreateCategoryRequest,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    category = crud.create_category(db, body)
    audit.record(db, request, admin.user_id, "create_category",
                 detail=f"id={category.id}, name={category.name}, parent_id={category.parent_id}")
    db.commit()
    db.refresh(category)
    return category


@router.patch("/{category_id}", response_model=CategoryRow)
def update_category(
    category_id: int,
    body: UpdateCategoryRequest,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Rename or re-parent.  A parent that would close a cycle is refused (409)."""
    category = crud.update_category(db, category_id, body)
    audit.record(db, request, admin.user_id, "update_category",
                 detail=f"id={category.id}, name={category.name}, parent_id={category.parent_id}")
    db.commit()
    db.refresh(category)
    return category


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    request: Request,
    admin: SessionEntry = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Delete a category with no subcategories (409 otherwise)."""
    name = crud.remove_category(db, category_id)
    audit.record(db, request, admin.user_id, "delete_category", detail=f"id={category_id}, name={name}")
    db.commit()
    return {"detail": "Category deleted"}
