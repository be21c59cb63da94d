# Overview: Flask API routes for the monthly sales summary; thin wrappers over the gateway.

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth
from ..services.sales_summary_service import SalesSummaryGateway, GatewayError


sales_summary_bp = Blueprint("sales_summary", __name__, url_prefix="/api/sales-summary")


def _gateway() -> SalesSummaryGateway:
    return SalesSummaryGateway(g.actor, g.permissions)


@sales_summary_bp.get("/users")
@require_auth
def active_users_route():
    """
    Users selectable in the sales rep picker.

    Requires: sales-summary-access grant, read on user.name
    """
    try:
        users = _gateway().get_active_users()
    except GatewayError as e:
        return jsonify({"error": e.message}), e.status_code

    return jsonify({"users": users}), 200


@sales_summary_bp.get("/monthly-totals")
@require_auth
def monthly_totals_route():
    """
    Trailing 12-month totals for one sales rep, oldest month first.

    Query: sales_rep_id (required)
    Requires: sales-summary-access grant, read on sales_transaction
    (account_id, sale_date, amount) and account
    """
    try:
        summary = _gateway().get_monthly_totals(request.args.get("sales_rep_id"))
    except GatewayError as e:
        return jsonify({"error": e.message}), e.status_code

    return jsonify(summary), 200
