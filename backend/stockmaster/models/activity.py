from __future__ import annotations

from ..extensions import db
from stockmaster.time_utils import to_utc_z, utcnow


class ActivityLog(db.Model):
    """
    Human-readable event history.

    IMMUTABLE: append-only, written by audit_service. Nothing else in the
    system depends on these rows existing; a dropped row is tolerated.
    """
    __tablename__ = "activity_logs"
    __table_args__ = (
        db.Index("ix_activity_logs_type_created", "type", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Free-form event tag, e.g. STOCK_ADJUSTED, CATEGORY_DELETED
    type = db.Column(db.String(64), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id", ondelete="CASCADE"), nullable=True, index=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)

    # "metadata" is reserved on declarative models
    details = db.Column("metadata", db.JSON, nullable=True)

    ip_address = db.Column(db.String(45), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now(), index=True)

    user = db.relationship("User", back_populates="activity_logs")
    product = db.relationship("Product", back_populates="activity_logs")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "description": self.description,
            "user_id": self.user_id,
            "product_id": self.product_id,
            "category_id": self.category_id,
            "metadata": self.details,
            "ip_address": self.ip_address,
            "created_at": to_utc_z(self.created_at),
            "user_name": self.user.name if self.user else None,
            "product_name": self.product.name if self.product else None,
        }
