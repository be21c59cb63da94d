"""Monthly sales trend: window, dense series, attribution by current owner."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import event

from salesdesk.extensions import db
from salesdesk.services import account_service
from salesdesk.services.aggregation_service import MonthlyPoint, monthly_totals


FEB_2024 = date(2024, 2, 15)


@pytest.fixture
def count_selects(app):
    """Count SELECT statements issued while the fixture is active."""
    statements = []

    def _before_execute(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("SELECT"):
            statements.append(statement)

    event.listen(db.engine, "before_cursor_execute", _before_execute)
    yield statements
    event.remove(db.engine, "before_cursor_execute", _before_execute)


def test_scenario_single_month_of_sales(rep_a, make_account, add_sale):
    account = make_account(rep_a)
    add_sale(account, date(2024, 1, 20), "50.00")

    points = monthly_totals(rep_a.id, today=FEB_2024)

    assert len(points) == 12
    assert (points[-1].year, points[-1].month) == (2024, 2)
    assert (points[0].year, points[0].month) == (2023, 3)
    by_month = {(p.year, p.month): p.total for p in points}
    assert by_month[(2024, 1)] == Decimal("50.00")
    assert all(total == 0 for key, total in by_month.items() if key != (2024, 1))


def test_subject_without_accounts_gets_twelve_zero_points(rep_a):
    points = monthly_totals(rep_a.id, today=FEB_2024)

    assert len(points) == 12
    assert all(p.total_cents == 0 for p in points)


def test_series_is_contiguous_and_ascending(rep_a):
    points = monthly_totals(rep_a.id, today=date(2024, 12, 31))

    keys = [(p.year, p.month) for p in points]
    assert keys == [(2024, m) for m in range(1, 13)]
    assert len(set(keys)) == 12


def test_sums_multiple_accounts_and_sales_per_month(rep_a, make_account, add_sale):
    first = make_account(rep_a, "First")
    second = make_account(rep_a, "Second")
    add_sale(first, date(2023, 11, 1), "10.10")
    add_sale(first, date(2023, 11, 30), "20.20")
    add_sale(second, date(2023, 11, 15), "0.05")
    add_sale(second, date(2024, 2, 1), "-5.00")

    by_month = {(p.year, p.month): p.total for p in monthly_totals(rep_a.id, today=FEB_2024)}

    assert by_month[(2023, 11)] == Decimal("30.35")
    assert by_month[(2024, 2)] == Decimal("-5.00")


def test_window_boundaries(rep_a, make_account, add_sale):
    account = make_account(rep_a)
    add_sale(account, date(2023, 2, 28), "1.00")   # before window
    add_sale(account, date(2023, 3, 1), "2.00")    # first day of window
    add_sale(account, date(2024, 2, 15), "4.00")   # today
    add_sale(account, date(2024, 2, 16), "8.00")   # after today

    points = monthly_totals(rep_a.id, today=FEB_2024)

    assert points[0].total == Decimal("2.00")
    assert points[-1].total == Decimal("4.00")
    assert sum(p.total_cents for p in points) == 600


def test_only_subjects_accounts_are_counted(rep_a, rep_b, make_account, add_sale):
    add_sale(make_account(rep_a), date(2024, 1, 5), "100.00")
    add_sale(make_account(rep_b), date(2024, 1, 5), "999.00")

    by_month = {(p.year, p.month): p.total for p in monthly_totals(rep_a.id, today=FEB_2024)}

    assert by_month[(2024, 1)] == Decimal("100.00")


def test_attribution_follows_current_owner(rep_a, rep_b, make_account, add_sale):
    account = make_account(rep_a)
    add_sale(account, date(2023, 6, 1), "75.00")

    account_service.transfer_ownership(account.id, rep_b.id)

    assert all(p.total_cents == 0 for p in monthly_totals(rep_a.id, today=FEB_2024))
    by_month = {(p.year, p.month): p.total for p in monthly_totals(rep_b.id, today=FEB_2024)}
    assert by_month[(2023, 6)] == Decimal("75.00")


def test_repeated_calls_return_identical_series(rep_a, make_account, add_sale):
    add_sale(make_account(rep_a), date(2023, 9, 9), "12.34")

    assert monthly_totals(rep_a.id, today=FEB_2024) == monthly_totals(rep_a.id, today=FEB_2024)


def test_single_aggregate_query(rep_a, make_account, add_sale, count_selects):
    for index in range(5):
        add_sale(make_account(rep_a, f"Account {index}"), date(2023, 4 + index, 1), "1.00")
    rep_id = rep_a.id
    count_selects.clear()

    monthly_totals(rep_id, today=FEB_2024)

    assert len(count_selects) == 1


def test_monthly_point_to_dict():
    point = MonthlyPoint(year=2024, month=1, total_cents=5000)

    assert point.to_dict() == {"year": 2024, "month": 1, "total": "50.00", "total_cents": 5000}
