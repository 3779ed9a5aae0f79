from __future__ import annotations

from ..extensions import db
from stockmaster.time_utils import to_utc_z, utcnow


class User(db.Model):
    """
    User accounts for authentication and attribution.

    Email is globally unique and is the login identifier. Deleting a user
    removes the inventory transactions and activity rows attributed to them.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("email", name="uq_users_email"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    company_name = db.Column(db.String(255), nullable=False, default="")
    profile_picture = db.Column(db.String(255), nullable=True)
    role = db.Column(db.String(32), nullable=False, default="user")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    transactions = db.relationship(
        "InventoryTransaction",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy=True,
    )
    activity_logs = db.relationship(
        "ActivityLog",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy=True,
    )
    settings = db.relationship(
        "UserSettings",
        back_populates="user",
        cascade="all, delete-orphan",
        uselist=False,
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "company_name": self.company_name,
            "profile_picture": self.profile_picture,
            "role": self.role,
            "created_at": to_utc_z(self.created_at),
        }
