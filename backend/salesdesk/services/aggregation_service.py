# Overview: Service-layer operations for the monthly sales trend.

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import extract, func

from ..extensions import db
from ..models import Account, SalesTransaction
from salesdesk.time_utils import month_window, today as server_today, trailing_months


WINDOW_MONTHS = 12


@dataclass(frozen=True)
class MonthlyPoint:
    year: int
    month: int
    total_cents: int = 0

    @property
    def total(self) -> Decimal:
        return Decimal(self.total_cents).scaleb(-2)

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "month": self.month,
            "total": f"{self.total:.2f}",
            "total_cents": self.total_cents,
        }


def _sparse_monthly_totals(subject_user_id: int, start: date, end: date) -> dict[tuple[int, int], int]:
    """
    One aggregate round trip: cents per (year, month) for accounts the subject
    currently owns, restricted to [start, end].
    """
    year_expr = extract("year", SalesTransaction.sale_date)
    month_expr = extract("month", SalesTransaction.sale_date)

    rows = db.session.query(
        year_expr.label("year"),
        month_expr.label("month"),
        func.coalesce(func.sum(SalesTransaction.amount_cents), 0).label("total_cents"),
    ).join(Account, Account.id == SalesTransaction.account_id).filter(
        Account.owner_id == subject_user_id,
        SalesTransaction.sale_date >= start,
        SalesTransaction.sale_date <= end,
    ).group_by(year_expr, month_expr).all()

    return {(int(row.year), int(row.month)): int(row.total_cents or 0) for row in rows}


def monthly_totals(subject_user_id: int, *, today: date | None = None) -> list[MonthlyPoint]:
    """
    Twelve MonthlyPoints, oldest first, ending with the current month.

    Attribution follows the account's current owner. Months without sales
    are present with a zero total, so the result always has 12 entries.
    """
    as_of = today or server_today()
    start, end = month_window(as_of, WINDOW_MONTHS)

    sparse = _sparse_monthly_totals(subject_user_id, start, end)

    return [
        MonthlyPoint(year=year, month=month, total_cents=sparse.get((year, month), 0))
        for year, month in trailing_months(as_of, WINDOW_MONTHS)
    ]
