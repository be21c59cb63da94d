from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from salesdesk.time_utils import to_utc_z

class SalesTransaction(db.Model):
    """
    A single sale recorded against an account.

    IMMUTABLE: created only through the guarded insert path, never updated
    or deleted. Amounts are stored in cents; `amount` exposes the 2-digit
    decimal value.
    """
    __tablename__ = "sales_transactions"
    __table_args__ = (
        # Monthly summary filters by account and date range
        db.Index("ix_sales_transactions_account_date", "account_id", "sale_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.Integer, db.ForeignKey("accounts.id"), nullable=False)
    sale_date = db.Column(db.Date, nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)

    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    account = db.relationship("Account", backref=db.backref("sales_transactions", lazy=True))

    @property
    def amount(self) -> Decimal | None:
        if self.amount_cents is None:
            return None
        return Decimal(self.amount_cents).scaleb(-2)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "sale_date": self.sale_date.isoformat() if self.sale_date else None,
            "amount": f"{self.amount:.2f}" if self.amount_cents is not None else None,
            "amount_cents": self.amount_cents,
            "created_by_user_id": self.created_by_user_id,
            "created_at": to_utc_z(self.created_at),
        }
