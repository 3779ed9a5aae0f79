from __future__ import annotations

import enum

from ..extensions import db
from ._serialize import number_out
from stockmaster.time_utils import to_utc_z, utcnow


class TransactionType(str, enum.Enum):
    """
    Kinds of rows in the stock ledger.

    Only IN, OUT and ADJUST are produced by the API. RETURN and TRANSFER are
    accepted by the schema so historical or imported rows stay valid.
    """
    IN = "IN"
    OUT = "OUT"
    ADJUST = "ADJUST"
    RETURN = "RETURN"
    TRANSFER = "TRANSFER"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


# Types accepted by the adjust-stock entry point
MUTABLE_TRANSACTION_TYPES = (TransactionType.IN, TransactionType.OUT, TransactionType.ADJUST)


class Category(db.Model):
    """
    Product grouping.

    A category may not be deleted while any product references it; the guard
    lives in categories_service, not in the schema.
    """
    __tablename__ = "categories"
    __table_args__ = (
        db.UniqueConstraint("name", name="uq_categories_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    # The ORM never nulls product.category_id on delete; the guard and the FK decide
    products = db.relationship("Product", back_populates="category", lazy=True, passive_deletes="all")

    def __repr__(self) -> str:
        return f"<Category id={self.id} name={self.name!r}>"

    def to_dict(self, product_count: int | None = None) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "created_at": to_utc_z(self.created_at),
            "product_count": int(product_count or 0),
        }


class Product(db.Model):
    """
    Product master data and the current on-hand quantity.

    Product.stock is the authoritative quantity. Every committed change to it
    is mirrored by an InventoryTransaction row (best-effort, see audit_service).
    stock never goes negative: OUT mutations are rejected when they exceed it.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("sku", name="uq_products_sku"),
        db.CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        db.CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        db.Index("ix_products_stock_min_stock", "stock", "min_stock"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    sku = db.Column(db.String(64), nullable=False)

    price = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    stock = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    min_stock = db.Column(db.Numeric(10, 2), nullable=False, default=5)

    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now(), index=True)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )
    # Bumped on every UPDATE; a write against a stale read raises StaleDataError
    version_id = db.Column(db.Integer, nullable=False, default=1)

    category = db.relationship("Category", back_populates="products")
    transactions = db.relationship(
        "InventoryTransaction",
        back_populates="product",
        cascade="all, delete-orphan",
        lazy=True,
    )
    activity_logs = db.relationship(
        "ActivityLog",
        back_populates="product",
        cascade="all, delete-orphan",
        lazy=True,
    )
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r} name={self.name!r} stock={self.stock}>"

    @property
    def is_low_stock(self) -> bool:
        return 0 < self.stock <= self.min_stock

    @property
    def is_out_of_stock(self) -> bool:
        return self.stock == 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "sku": self.sku,
            "price": number_out(self.price),
            "stock": number_out(self.stock),
            "min_stock": number_out(self.min_stock),
            "category_id": self.category_id,
            "category_name": self.category.name if self.category else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class InventoryTransaction(db.Model):
    """
    Quantitative stock ledger row.

    IMMUTABLE: written once by audit_service, never updated. previous_stock and
    new_stock are a snapshot of Product.stock around the mutation.
    """
    __tablename__ = "inventory_transactions"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_invtx_quantity_positive"),
        db.Index("ix_invtx_product_created", "product_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    product_id = db.Column(
        db.Integer, db.ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    type = db.Column(
        db.Enum(*TransactionType.values(), name="inventory_transaction_type", native_enum=False),
        nullable=False,
        index=True,
    )

    quantity = db.Column(db.Numeric(10, 2), nullable=False)
    previous_stock = db.Column(db.Numeric(10, 2), nullable=False)
    new_stock = db.Column(db.Numeric(10, 2), nullable=False)

    # Call-site tag: MANUAL_ADJUSTMENT, STOCK_UPDATE, INITIAL_STOCK
    reference = db.Column(db.String(100), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now(), index=True)

    product = db.relationship("Product", back_populates="transactions")
    user = db.relationship("User", back_populates="transactions")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "user_id": self.user_id,
            "type": self.type,
            "quantity": number_out(self.quantity),
            "previous_stock": number_out(self.previous_stock),
            "new_stock": number_out(self.new_stock),
            "reference": self.reference,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "user_name": self.user.name if self.user else None,
            "product_name": self.product.name if self.product else None,
            "product_sku": self.product.sku if self.product else None,
        }
