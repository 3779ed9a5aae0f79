# backend/stockmaster/services/products_service.py
"""
Products Service

Create/update/delete for the product catalog. Stock changes made through a
generic edit are reconciled into the audit trail by stock_service; the
dedicated adjust-stock entry point lives in stock_service as well.
"""
from __future__ import annotations

from decimal import Decimal

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from ..extensions import db
from ..models import Category, Product
from ..validation import ConflictError, NotFoundError, ValidationError
from . import audit_service, stock_service
from .concurrency import lock_for_update, run_with_retry

PRODUCT_MUTABLE_FIELDS = {"name", "description", "sku", "price", "stock", "min_stock", "category_id"}

DEFAULT_MIN_STOCK = Decimal(5)


def apply_product_patch(p: Product, patch: dict) -> list[str]:
    """Apply allowed fields; returns the names of fields whose value changed."""
    changed = []
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        if getattr(p, k) != v:
            changed.append(k)
        setattr(p, k, v)
    return changed


def _require_category(category_id: int | None) -> None:
    if category_id is None:
        return
    if db.session.get(Category, category_id) is None:
        raise ValidationError("Category not found")


def _ensure_sku_available(sku: str, exclude_product_id: int | None = None) -> None:
    q = db.session.query(Product.id).filter(Product.sku == sku)
    if exclude_product_id is not None:
        q = q.filter(Product.id != exclude_product_id)
    if q.first() is not None:
        raise ConflictError("SKU already exists", status_code=400)


def list_products(search: str | None = None, category_id: int | None = None) -> list[dict]:
    """Newest first, with category_name joined in."""
    q = db.session.query(Product).options(joinedload(Product.category))
    if category_id is not None:
        q = q.filter(Product.category_id == category_id)
    if search:
        pattern = f"%{search.strip()}%"
        q = q.filter(or_(Product.name.ilike(pattern), Product.sku.ilike(pattern)))
    products = q.order_by(Product.created_at.desc(), Product.id.desc()).all()
    return [p.to_dict() for p in products]


def get_product(product_id: int) -> Product:
    product = (
        db.session.query(Product)
        .options(joinedload(Product.category))
        .filter_by(id=product_id)
        .first()
    )
    if product is None:
        raise NotFoundError("Product not found")
    return product


def create_product(*, patch: dict, acting_user_id: int) -> dict:
    """
    Create product using a validated patch dict.

    A product created with stock > 0 gets exactly one IN ledger row 0 -> stock
    tagged INITIAL_STOCK.
    """
    _require_category(patch.get("category_id"))
    _ensure_sku_available(patch["sku"])

    p = Product(stock=Decimal(0), min_stock=DEFAULT_MIN_STOCK)
    apply_product_patch(p, {k: v for k, v in patch.items() if v is not None})

    db.session.add(p)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("SKU already exists", status_code=400)

    stock_service.record_initial_stock(p, acting_user_id=acting_user_id)
    audit_service.record_activity(
        "PRODUCT_CREATED",
        f'Product "{p.name}" (SKU: {p.sku}) created with initial stock: '
        f"{p.to_dict()['stock']}",
        user_id=acting_user_id,
        product_id=p.id,
        category_id=p.category_id,
    )

    return get_product(p.id).to_dict()


def update_product(*, product_id: int, patch: dict, acting_user_id: int) -> dict:
    """
    Partial update. If the submitted stock differs from the stored value the
    change is reconciled into the ledger as an ADJUST (see stock_service).
    """
    if db.session.get(Product, product_id) is None:
        raise NotFoundError("Product not found")
    if "sku" in patch:
        _ensure_sku_available(patch["sku"], exclude_product_id=product_id)
    if "category_id" in patch:
        _require_category(patch["category_id"])

    def _op():
        p = lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()
        if p is None:
            raise NotFoundError("Product not found")
        previous_stock = Decimal(p.stock)
        previous_category_id = p.category_id
        changed = apply_product_patch(p, patch)
        db.session.commit()
        return p, previous_stock, previous_category_id, changed

    try:
        p, previous_stock, previous_category_id, changed = run_with_retry(_op)
    except IntegrityError:
        raise ConflictError("SKU already exists", status_code=400)

    stock_service.reconcile_stock_edit(
        p,
        previous_stock=previous_stock,
        acting_user_id=acting_user_id,
        previous_category_id=previous_category_id,
        changed_fields=changed,
    )

    return get_product(product_id).to_dict()


def delete_product(*, product_id: int, acting_user_id: int) -> None:
    """Delete a product; its ledger and activity rows go with it."""
    p = db.session.get(Product, product_id)
    if p is None:
        raise NotFoundError("Product not found")

    name, sku = p.name, p.sku
    db.session.delete(p)
    db.session.commit()

    audit_service.record_activity(
        "PRODUCT_DELETED",
        f'Product "{name}" ({sku}) deleted',
        user_id=acting_user_id,
        metadata={"product_id": product_id, "sku": sku},
    )
