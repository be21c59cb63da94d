from __future__ import annotations

from ..extensions import db
from salesdesk.time_utils import to_utc_z

class Account(db.Model):
    """
    Customer account owned by exactly one user.

    Ownership is mutable. Sales transactions reference the account, not the
    owner, so the monthly summary always credits the *current* owner.
    """
    __tablename__ = "accounts"
    __table_args__ = (
        db.Index("ix_accounts_owner_id", "owner_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    owner = db.relationship("User", backref=db.backref("accounts", lazy=True))

    def __repr__(self) -> str:
        return f"<Account id={self.id} name={self.name!r} owner_id={self.owner_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "owner_id": self.owner_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
