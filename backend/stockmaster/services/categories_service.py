# Overview: Service-layer operations for categories; encapsulates the lifecycle guard and database work.

"""
Category lifecycle rules:
- name is required and trimmed; names are unique (store constraint + pre-check)
- a category cannot be deleted while any product references it
- the delete guard is a check-then-delete and is not atomic against a product
  being created into the category at the same moment
"""

from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Category, Product
from ..validation import ConflictError, NotFoundError, ValidationError
from . import audit_service


def _text(value) -> str:
    return "" if value is None else str(value).strip()


def _clean(name, description) -> tuple[str, str]:
    name = _text(name)
    if not name:
        raise ValidationError("Category name is required")
    if len(name) > Category.__table__.c.name.type.length:
        raise ValidationError("Category name is too long")
    description = _text(description)
    return name, description


def _ensure_name_available(name: str, exclude_id: int | None = None) -> None:
    q = db.session.query(Category.id).filter(Category.name == name)
    if exclude_id is not None:
        q = q.filter(Category.id != exclude_id)
    if q.first() is not None:
        raise ConflictError("Category name already exists", status_code=400)


def count_products(category_id: int) -> int:
    return int(
        db.session.query(func.count(Product.id))
        .filter(Product.category_id == category_id)
        .scalar()
        or 0
    )


def list_categories() -> list[dict]:
    """All categories ordered by name, each with its product_count."""
    rows = (
        db.session.query(Category, func.count(Product.id))
        .outerjoin(Product, Product.category_id == Category.id)
        .group_by(Category.id)
        .order_by(Category.name.asc())
        .all()
    )
    return [category.to_dict(product_count=count) for category, count in rows]


def get_category(category_id: int) -> Category:
    category = db.session.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


def create_category(*, name, description=None, acting_user_id: int) -> dict:
    name, description = _clean(name, description)
    _ensure_name_available(name)

    category = Category(name=name, description=description)
    db.session.add(category)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Category name already exists", status_code=400)

    audit_service.record_activity(
        "CATEGORY_CREATED",
        f'Category "{name}" created',
        user_id=acting_user_id,
        category_id=category.id,
    )
    return category.to_dict(product_count=0)


def update_category(*, category_id: int, name, description=None, acting_user_id: int) -> dict:
    name, description = _clean(name, description)
    category = get_category(category_id)
    _ensure_name_available(name, exclude_id=category_id)

    old_name = category.name
    category.name = name
    category.description = description
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Category name already exists", status_code=400)

    if old_name != name:
        description_text = f'Category renamed from "{old_name}" to "{name}"'
        metadata = {"old_name": old_name, "new_name": name}
    else:
        description_text = f'Category "{name}" details updated'
        metadata = None

    audit_service.record_activity(
        "CATEGORY_UPDATED",
        description_text,
        user_id=acting_user_id,
        category_id=category_id,
        metadata=metadata,
    )
    return category.to_dict(product_count=count_products(category_id))


def delete_category(*, category_id: int, acting_user_id: int) -> None:
    """
    Delete a category that no product references.

    Raises ConflictError (400) while products still reference it.
    """
    category = get_category(category_id)
    if count_products(category_id) > 0:
        raise ConflictError("Cannot delete category with existing products", status_code=400)

    name = category.name
    db.session.delete(category)
    try:
        db.session.commit()
    except IntegrityError:
        # a product was assigned between the count and the delete
        db.session.rollback()
        raise ConflictError("Cannot delete category with existing products", status_code=400)

    audit_service.record_activity(
        "CATEGORY_DELETED",
        f'Category "{name}" deleted',
        user_id=acting_user_id,
        metadata={"category_id": category_id, "name": name},
    )
