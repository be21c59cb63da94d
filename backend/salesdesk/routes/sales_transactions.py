# Overview: Flask API routes for recording sales transactions in batches.

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth
from ..services.sales_summary_service import SalesSummaryGateway, GatewayError


sales_transactions_bp = Blueprint("sales_transactions", __name__, url_prefix="/api/sales-transactions")


@sales_transactions_bp.post("")
@require_auth
def create_transactions_route():
    """
    Record a batch of sales transactions.

    Body: {"records": [{"account_id", "sale_date", "amount"}, ...], "all_or_none": false}

    Returns 200 with one result per record, even when some were rejected.
    A malformed batch returns 400; missing create access returns 403.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "JSON object body required"}), 400

    all_or_none = data.get("all_or_none", False)
    if not isinstance(all_or_none, bool):
        return jsonify({"error": "all_or_none must be a boolean"}), 400

    gateway = SalesSummaryGateway(g.actor, g.permissions)
    try:
        result = gateway.create_transactions(data.get("records"), all_or_none=all_or_none)
    except GatewayError as e:
        return jsonify({"error": e.message}), e.status_code

    return jsonify(result), 200
