# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Category tree resolution.

The schema allows any depth, but listings surface exactly one level: roots
with their direct children.  Deeper nodes are reachable through
``find_children`` and ``get_category_path``.
"""

from typing import List, Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from core.errors import ConflictError, NotFoundError
from core.logger import logger
from models.category import Category
from categories.schemas import CreateCategoryRequest, UpdateCategoryRequest


def find_all(db: Session) -> List[Category]:
    """Root categories, id ascending, each with its direct children attached."""
    return (
        db.query(Category)
        .options(selectinload(Category.children))
        .filter(Category.parent_id.is_(None))
        .order_by(Category.id.asc())
        .all()
    )


# GET /categories and GET /categories/root return the same shape
find_roots = find_all


def find_children(db: Session, parent_id: int) -> List[Category]:
    return (
        db.query(Category)
        .filter(Category.parent_id == parent_id)
        .order_by(Category.id.asc())
        .all()
    )


def find_one(db: Session, category_id: int) -> Category:
    category = (
        db.query(Category)
        .options(selectinload(Category.children), joinedload(Category.parent))
        .filter(Category.id == category_id)
        .first()
    )
    if not category:
        raise NotFoundError("Category not found")
    return category


def get_category_path(db: Session, category_id: int) -> List[Category]:
    """
    Walk parent links up from *category_id* and return the chain root-first.

    A missing parent ends the walk as if the top had been reached.  A node
    seen twice means the parent links form a cycle; the walk stops there.
    An unknown *category_id* yields an empty list.
    """
    path: List[Category] = []
    seen = set()
    current = db.query(Category).filter(Category.id == category_id).first()

    while current is not None:
        if current.id in seen:
            logger.warning("Category parent cycle detected at id=%s (start id=%s)", current.id, category_id)
            break
        seen.add(current.id)
        path.append(current)
        if current.parent_id is None:
            break
        current = db.query(Category).filter(Category.id == current.parent_id).first()

    path.reverse()
    return path


def _check_parent(db: Session, category_id: Optional[int], parent_id: int) -> None:
    if category_id is not None and parent_id == category_id:
        raise ConflictError("A category cannot be its own parent")
    if not db.query(Category.id).filter(Category.id == parent_id).first():
        raise NotFoundError("Parent category not found")
    if category_id is not None and any(c.id == category_id for c in get_category_path(db, parent_id)):
        raise ConflictError("Moving the category there would create a cycle")


def create_category(db: Session, body: CreateCategoryRequest) -> Category:
    if body.parent_id is not None:
        _check_parent(db, None, body.parent_id)
    category = Category(name=body.name, parent_id=body.parent_id)
    db.add(category)
    db.flush()
    db.refresh(category)
    return category


def update_category(db: Session, category_id: int, body: UpdateCategoryRequest) -> Category:
    category = find_one(db, category_id)
    fields = body.model_fields_set

    if "parent_id" in fields:
        if body.parent_id is not None:
            _check_parent(db, category_id, body.parent_id)
        category.parent_id = body.parent_id
    if "name" in fields and body.name is not None:
        # Content rows keep the old name; see models/content.py
        category.name = body.name

    db.flush()
    db.refresh(category)
    return category


def remove_category(db: Session, category_id: int) -> str:
    """Delete a leaf category.  Refuses while any child points at it."""
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError("Category not found")

    children = db.query(Category).filter(Category.parent_id == category_id).count()
    if children > 0:
        raise ConflictError("Cannot delete a category that has subcategories")

    name = category.name
    db.delete(category)
    db.flush()
    return name
