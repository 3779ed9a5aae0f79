# Overview: Service-layer operations for stock mutations; the only place Product.stock changes.

"""
StockMaster stock invariants (authoritative)

Stock model:
- Product.stock is the authoritative on-hand quantity (not ledger-derived).
- Every committed change to stock is followed by an InventoryTransaction with
  previous_stock/new_stock snapshots and an ActivityLog entry.

Mutation rules (adjust-stock entry point):
- IN:     new = current + quantity
- OUT:    quantity <= current, else InsufficientStockError; new = current - quantity
- ADJUST: new = quantity (absolute target, not a delta)
- quantity must be finite and > 0.
- stock never goes negative after a committed mutation.

Concurrency:
- The read of the current stock and the write of the new stock happen in one
  DB transaction with the product row locked (SELECT ... FOR UPDATE).
- Product.version_id guards stores that ignore the lock (SQLite): the UPDATE
  only matches the version that was read, a stale write raises StaleDataError,
  and run_with_retry re-reads and re-applies. No concurrent update is lost.
- Audit rows are written after commit via audit_service (best-effort).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from ..extensions import db
from ..models import Product, TransactionType
from ..models.inventory import MUTABLE_TRANSACTION_TYPES
from ..models._serialize import number_out
from ..validation import (
    InsufficientStockError,
    NotFoundError,
    ValidationError,
    parse_positive_quantity,
)
from . import audit_service
from .concurrency import lock_for_update, run_with_retry

REFERENCE_MANUAL_ADJUSTMENT = "MANUAL_ADJUSTMENT"
REFERENCE_STOCK_UPDATE = "STOCK_UPDATE"
REFERENCE_INITIAL_STOCK = "INITIAL_STOCK"


@dataclass(frozen=True)
class StockChangeResult:
    product: Product
    type: str
    quantity: Decimal
    previous_stock: Decimal
    new_stock: Decimal
    notes: str | None = None

    def transaction_summary(self) -> dict:
        return {
            "type": self.type,
            "quantity": number_out(self.quantity),
            "previousStock": number_out(self.previous_stock),
            "newStock": number_out(self.new_stock),
            "notes": self.notes,
        }


def parse_mutation_type(raw: Any) -> TransactionType:
    value = str(raw or "").strip().upper()
    try:
        tx_type = TransactionType(value)
    except ValueError:
        tx_type = None
    if tx_type not in MUTABLE_TRANSACTION_TYPES:
        raise ValidationError("Invalid type. Must be IN, OUT, or ADJUST.")
    return tx_type


def compute_new_stock(tx_type: TransactionType, current: Decimal, quantity: Decimal) -> Decimal:
    """Pure arithmetic for one mutation. Raises InsufficientStockError for an oversized OUT."""
    if tx_type is TransactionType.IN:
        return current + quantity
    if tx_type is TransactionType.OUT:
        if quantity > current:
            raise InsufficientStockError(requested=quantity, available=current)
        return current - quantity
    if tx_type is TransactionType.ADJUST:
        return quantity
    raise ValidationError("Invalid type. Must be IN, OUT, or ADJUST.")


def _lock_product(product_id: int) -> Product:
    product = lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()
    if product is None:
        raise NotFoundError("Product not found")
    return product


def apply_stock_change(
    product_id: int,
    type: Any,
    quantity: Any,
    notes: str | None = None,
    *,
    acting_user_id: int,
    reference: str = REFERENCE_MANUAL_ADJUSTMENT,
) -> StockChangeResult:
    """
    Apply one IN/OUT/ADJUST mutation to a product's stock.

    Raises:
        ValidationError: missing/invalid type or non-positive quantity
        NotFoundError: product does not exist
        InsufficientStockError: OUT exceeds the stock on hand (stock unchanged)
    """
    if quantity is None or quantity == "" or not type:
        raise ValidationError("Quantity and type are required")

    tx_type = parse_mutation_type(type)
    qty = parse_positive_quantity(quantity)
    if notes is not None:
        notes = str(notes).strip() or None

    def _op():
        product = _lock_product(product_id)
        previous = Decimal(product.stock)
        new_stock = compute_new_stock(tx_type, previous, qty)
        product.stock = new_stock
        db.session.commit()
        return product, previous, new_stock

    product, previous, new_stock = run_with_retry(_op)

    audit_service.record_inventory_transaction(
        product_id=product.id,
        user_id=acting_user_id,
        type=tx_type.value,
        quantity=qty,
        previous_stock=previous,
        new_stock=new_stock,
        reference=reference,
        notes=notes,
    )
    audit_service.record_activity(
        "STOCK_ADJUSTED",
        f'Stock {tx_type.value.lower()} for "{product.name}": '
        f"{number_out(previous)} → {number_out(new_stock)} (Δ: {number_out(qty)})",
        user_id=acting_user_id,
        product_id=product.id,
        metadata={
            "type": tx_type.value,
            "quantity": float(qty),
            "previous_stock": float(previous),
            "new_stock": float(new_stock),
            "reference": reference,
        },
    )

    db.session.refresh(product)
    return StockChangeResult(
        product=product,
        type=tx_type.value,
        quantity=qty,
        previous_stock=previous,
        new_stock=new_stock,
        notes=notes,
    )


def record_initial_stock(product: Product, *, acting_user_id: int) -> None:
    """Ledger row for a newly created product that starts with stock on hand."""
    stock = Decimal(product.stock)
    if stock <= 0:
        return
    audit_service.record_inventory_transaction(
        product_id=product.id,
        user_id=acting_user_id,
        type=TransactionType.IN.value,
        quantity=stock,
        previous_stock=Decimal(0),
        new_stock=stock,
        reference=REFERENCE_INITIAL_STOCK,
        notes="Initial stock when product was created",
    )


def reconcile_stock_edit(
    product: Product,
    *,
    previous_stock: Decimal,
    acting_user_id: int,
    previous_category_id: int | None,
    changed_fields: list[str],
) -> str:
    """
    Produce the audit trail for a generic product edit.

    Called after the edit has committed. A stock difference is always recorded
    as ADJUST with quantity=|delta| and reference STOCK_UPDATE; the activity
    type tells increases from decreases. Without a stock difference a single
    PRODUCT_UPDATED activity is written. A category change rides along in the
    same activity's metadata.

    Returns the activity type that was recorded.
    """
    new_stock = Decimal(product.stock)
    delta = new_stock - Decimal(previous_stock)

    metadata: dict[str, Any] = {"changed_fields": sorted(changed_fields)}
    if previous_category_id != product.category_id:
        metadata["category_change"] = {"from": previous_category_id, "to": product.category_id}

    if delta != 0:
        audit_service.record_inventory_transaction(
            product_id=product.id,
            user_id=acting_user_id,
            type=TransactionType.ADJUST.value,
            quantity=abs(delta),
            previous_stock=Decimal(previous_stock),
            new_stock=new_stock,
            reference=REFERENCE_STOCK_UPDATE,
            notes="Stock updated via product edit",
        )
        activity_type = "STOCK_INCREASED" if delta > 0 else "STOCK_DECREASED"
        metadata["stock_change"] = {
            "from": float(previous_stock),
            "to": float(new_stock),
            "delta": float(delta),
        }
        description = (
            f'Stock for "{product.name}" ({product.sku}) changed from '
            f"{number_out(Decimal(previous_stock))} to {number_out(new_stock)} "
            f"(Δ: {number_out(abs(delta))})"
        )
    else:
        activity_type = "PRODUCT_UPDATED"
        description = f'Product "{product.name}" ({product.sku}) details updated'

    audit_service.record_activity(
        activity_type,
        description,
        user_id=acting_user_id,
        product_id=product.id,
        category_id=product.category_id,
        metadata=metadata,
    )
    return activity_type
