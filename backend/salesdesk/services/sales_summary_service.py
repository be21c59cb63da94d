# Overview: Permission-checked entry point for the sales summary and the write path.

"""
Sales Summary Gateway

WHY: The only way in from outside the service layer. Every operation checks
grants and object/field access in code before touching data, and every
failure leaves as a GatewayError carrying a short, user-safe message.

Checks per operation:
- get_monthly_totals: grant sales-summary-access; read on sales_transaction
  and its account_id, sale_date and amount fields; read on account
- get_active_users: grant sales-summary-access; read on user.name
- create_transactions: create on sales_transaction; edit on its fields
"""

from __future__ import annotations

from typing import Any

from flask import current_app

from ..extensions import db
from ..permissions import (
    SALES_SUMMARY_ACCESS,
    SALES_TRANSACTION,
    SALES_TRANSACTION_FIELDS,
    ACCOUNT,
    USER,
)
from ..validation import ValidationError, coerce_id
from . import aggregation_service, permission_service, sales_transaction_service
from .account_service import OwnershipResolver
from .permission_service import PermissionDeniedError
from .transaction_guard import Actor


SUMMARY_ACCESS_MESSAGE = "You do not have access to the sales summary."
CREATE_ACCESS_MESSAGE = "You do not have permission to create sales transactions."
SALES_REP_REQUIRED_MESSAGE = "A sales rep must be selected."
LOAD_FAILED_MESSAGE = "Failed to load data."
USERS_FAILED_MESSAGE = "Failed to load users."
SAVE_FAILED_MESSAGE = "Failed to save sales transactions."


class GatewayError(Exception):
    """User-facing failure with the HTTP status it maps to."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SalesSummaryGateway:

    def __init__(self, actor: Actor, permissions, *, ownership=None):
        self.actor = actor
        self.permissions = permissions
        self.ownership = ownership or OwnershipResolver()

    def get_monthly_totals(self, subject_user_id: Any) -> dict:
        try:
            self.permissions.require_grant(SALES_SUMMARY_ACCESS)
            self.permissions.require_read(SALES_TRANSACTION, SALES_TRANSACTION_FIELDS)
            self.permissions.require_read(ACCOUNT)
        except PermissionDeniedError:
            raise GatewayError(SUMMARY_ACCESS_MESSAGE, 403)

        try:
            subject_id = coerce_id(subject_user_id, "sales_rep_id")
        except ValidationError:
            raise GatewayError(SALES_REP_REQUIRED_MESSAGE, 400)

        try:
            points = aggregation_service.monthly_totals(subject_id)
        except Exception:
            current_app.logger.exception("Failed to compute monthly totals")
            raise GatewayError(LOAD_FAILED_MESSAGE, 500)

        return {"points": [point.to_dict() for point in points]}

    def get_active_users(self) -> list[dict]:
        """
        Every active user holding sales-summary-access, as label/value pairs.

        Unbounded: the whole eligible set is returned in one response.
        """
        try:
            self.permissions.require_grant(SALES_SUMMARY_ACCESS)
            self.permissions.require_read(USER, ("name",))
        except PermissionDeniedError:
            raise GatewayError(SUMMARY_ACCESS_MESSAGE, 403)

        try:
            users = permission_service.list_users_with_grant(SALES_SUMMARY_ACCESS)
        except Exception:
            current_app.logger.exception("Failed to list sales summary users")
            raise GatewayError(USERS_FAILED_MESSAGE, 500)

        return [{"label": user.name, "value": user.id} for user in users]

    def create_transactions(self, payloads: Any, *, all_or_none: bool = False) -> dict:
        try:
            self.permissions.require_create(SALES_TRANSACTION, SALES_TRANSACTION_FIELDS)
        except PermissionDeniedError:
            raise GatewayError(CREATE_ACCESS_MESSAGE, 403)

        try:
            result = sales_transaction_service.create_transactions(
                payloads,
                self.actor,
                permissions=self.permissions,
                ownership=self.ownership,
                all_or_none=all_or_none,
            )
        except ValidationError as exc:
            raise GatewayError(str(exc), 400)
        except Exception:
            db.session.rollback()
            current_app.logger.exception("Failed to save sales transactions")
            raise GatewayError(SAVE_FAILED_MESSAGE, 500)

        return result.to_dict()
