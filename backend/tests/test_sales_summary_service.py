"""Gateway: mandatory permission checks and user-safe error messages."""

from datetime import date

import pytest

from salesdesk.models import PermissionSet, SalesTransaction
from salesdesk.permissions import SALES_TRANSACTION, ACCOUNT
from salesdesk.services import aggregation_service, permission_service
from salesdesk.services import sales_summary_service
from salesdesk.services.permission_service import PermissionChecker
from salesdesk.services.sales_summary_service import GatewayError, SalesSummaryGateway
from salesdesk.services.transaction_guard import Actor, OWNERSHIP_ERROR
from salesdesk.time_utils import today


def _gateway(user):
    return SalesSummaryGateway(Actor.from_user(user), PermissionChecker(user.id))


class TestMonthlyTotals:

    def test_returns_twelve_points(self, db_session, rep_a, make_account, add_sale):
        add_sale(make_account(rep_a), today(), "42.00")

        summary = _gateway(rep_a).get_monthly_totals(rep_a.id)

        points = summary["points"]
        assert len(points) == 12
        assert points[-1]["total"] == "42.00"
        assert (points[-1]["year"], points[-1]["month"]) == (today().year, today().month)

    def test_any_rep_may_be_viewed(self, db_session, rep_a, rep_b, make_account, add_sale):
        add_sale(make_account(rep_b), today(), "7.00")

        summary = _gateway(rep_a).get_monthly_totals(str(rep_b.id))

        assert summary["points"][-1]["total_cents"] == 700

    @pytest.mark.parametrize("subject", [None, "", "abc", "1.5", 0, "²", "１", 10**20, "9" * 5000])
    def test_missing_subject_is_validation_error(self, db_session, rep_a, subject):
        with pytest.raises(GatewayError) as exc:
            _gateway(rep_a).get_monthly_totals(subject)

        assert exc.value.status_code == 400
        assert exc.value.message == sales_summary_service.SALES_REP_REQUIRED_MESSAGE

    def test_without_grant_is_denied(self, db_session, make_user):
        user = make_user("no_access")

        with pytest.raises(GatewayError) as exc:
            _gateway(user).get_monthly_totals(user.id)

        assert exc.value.status_code == 403
        assert exc.value.message == sales_summary_service.SUMMARY_ACCESS_MESSAGE

    def test_permission_check_runs_before_validation(self, db_session, make_user):
        user = make_user("no_access")

        with pytest.raises(GatewayError) as exc:
            _gateway(user).get_monthly_totals(None)

        assert exc.value.status_code == 403

    def test_missing_field_read_is_denied(self, db_session, make_user):
        db_session.add(PermissionSet(name="no_amount", label="No Amount"))
        db_session.commit()
        permission_service.grant_to_permission_set("no_amount", "sales-summary-access")
        permission_service.set_object_permission("no_amount", SALES_TRANSACTION, can_read=True, can_create=False)
        permission_service.set_object_permission("no_amount", ACCOUNT, can_read=True, can_create=False)
        for field_name in ("account_id", "sale_date"):
            permission_service.set_field_permission(
                "no_amount", SALES_TRANSACTION, field_name, can_read=True, can_edit=False
            )
        user = make_user("limited", sets=["no_amount"])

        with pytest.raises(GatewayError) as exc:
            _gateway(user).get_monthly_totals(user.id)

        assert exc.value.status_code == 403
        assert "amount" not in exc.value.message

    def test_internal_failure_is_masked(self, db_session, rep_a, monkeypatch):
        def _boom(*args, **kwargs):
            raise RuntimeError("SELECT secret FROM internals WHERE owner_id = 42")

        monkeypatch.setattr(aggregation_service, "monthly_totals", _boom)

        with pytest.raises(GatewayError) as exc:
            _gateway(rep_a).get_monthly_totals(rep_a.id)

        assert exc.value.status_code == 500
        assert exc.value.message == sales_summary_service.LOAD_FAILED_MESSAGE


class TestActiveUsers:

    def test_label_value_pairs(self, db_session, rep_a, rep_b, make_user):
        make_user("outsider")

        users = _gateway(rep_a).get_active_users()

        assert users == [
            {"label": "Alex Rep", "value": rep_a.id},
            {"label": "Blake Rep", "value": rep_b.id},
            {"label": "Morgan Manager", "value": rep_a.manager_id},
        ]

    def test_no_cap_on_result_size(self, db_session, rep_a, make_user):
        for index in range(60):
            make_user(f"rep_{index:02d}", sets=["sales_summary_access"])

        users = _gateway(rep_a).get_active_users()

        assert len(users) == 62

    def test_without_grant_is_denied(self, db_session, make_user):
        user = make_user("no_access")

        with pytest.raises(GatewayError) as exc:
            _gateway(user).get_active_users()

        assert exc.value.status_code == 403


class TestCreateTransactions:

    def test_delegates_to_guarded_write(self, db_session, rep_a, rep_b, make_account):
        mine = make_account(rep_a)
        theirs = make_account(rep_b)

        result = _gateway(rep_a).create_transactions([
            {"account_id": mine.id, "sale_date": date(2024, 3, 10).isoformat(), "amount": "100.00"},
            {"account_id": theirs.id, "sale_date": "2024-03-10", "amount": "100.00"},
        ])

        assert result["accepted"] == 1
        assert result["rejected"] == 1
        assert result["results"][1]["errors"] == [{"field": "account_id", "message": OWNERSHIP_ERROR}]

    def test_without_create_access_is_denied(self, db_session, make_user, make_account):
        user = make_user("no_access")
        account = make_account(user)

        with pytest.raises(GatewayError) as exc:
            _gateway(user).create_transactions([{"account_id": account.id, "sale_date": "2024-03-10", "amount": "1"}])

        assert exc.value.status_code == 403
        assert db_session.query(SalesTransaction).count() == 0

    def test_malformed_batch_is_validation_error(self, db_session, rep_a):
        with pytest.raises(GatewayError) as exc:
            _gateway(rep_a).create_transactions("not a list")

        assert exc.value.status_code == 400
        assert exc.value.message == "records must be a list"
