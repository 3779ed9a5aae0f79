from __future__ import annotations

from ..extensions import db
from stockmaster.time_utils import to_utc_z, utcnow


# Column defaults; also used when a row is created lazily on first access.
USER_SETTINGS_DEFAULTS = {
    "theme": "light",
    "language": "en",
    "email_notifications": True,
    "low_stock_alerts": True,
    "push_notifications": False,
    "items_per_page": 10,
    "default_view": "grid",
    "low_stock_threshold": 5,
    "auto_refresh": False,
    "refresh_interval": 30,
}


class UserSettings(db.Model):
    """Per-user UI preferences. One row per user, created on first read or write."""
    __tablename__ = "user_settings"
    __table_args__ = (
        db.UniqueConstraint("user_id", name="uq_user_settings_user"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    theme = db.Column(db.String(16), nullable=False, default=USER_SETTINGS_DEFAULTS["theme"])
    language = db.Column(db.String(8), nullable=False, default=USER_SETTINGS_DEFAULTS["language"])

    email_notifications = db.Column(db.Boolean, nullable=False, default=USER_SETTINGS_DEFAULTS["email_notifications"])
    low_stock_alerts = db.Column(db.Boolean, nullable=False, default=USER_SETTINGS_DEFAULTS["low_stock_alerts"])
    push_notifications = db.Column(db.Boolean, nullable=False, default=USER_SETTINGS_DEFAULTS["push_notifications"])

    items_per_page = db.Column(db.Integer, nullable=False, default=USER_SETTINGS_DEFAULTS["items_per_page"])
    default_view = db.Column(db.String(16), nullable=False, default=USER_SETTINGS_DEFAULTS["default_view"])
    low_stock_threshold = db.Column(db.Integer, nullable=False, default=USER_SETTINGS_DEFAULTS["low_stock_threshold"])

    auto_refresh = db.Column(db.Boolean, nullable=False, default=USER_SETTINGS_DEFAULTS["auto_refresh"])
    # seconds
    refresh_interval = db.Column(db.Integer, nullable=False, default=USER_SETTINGS_DEFAULTS["refresh_interval"])

    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now(), onupdate=utcnow)

    user = db.relationship("User", back_populates="settings")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "theme": self.theme,
            "language": self.language,
            "email_notifications": self.email_notifications,
            "low_stock_alerts": self.low_stock_alerts,
            "push_notifications": self.push_notifications,
            "items_per_page": self.items_per_page,
            "default_view": self.default_view,
            "low_stock_threshold": self.low_stock_threshold,
            "auto_refresh": self.auto_refresh,
            "refresh_interval": self.refresh_interval,
            "updated_at": to_utc_z(self.updated_at),
        }
