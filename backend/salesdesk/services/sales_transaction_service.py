# Overview: Guarded batch insert of sales transactions.

"""
Sales Transaction Write Path

WHY: Sales transactions may only be created through this path. Every batch
is field-validated and run through the creation guard before anything is
written, in a single unit of work.

Partial success is the default: rejected records never land, accepted ones
commit together. all_or_none=True persists nothing if any record fails.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from flask import current_app

from ..extensions import db
from ..models import SalesTransaction
from ..validation import ValidationError, coerce_id, coerce_date, coerce_amount_cents
from . import transaction_guard
from .transaction_guard import Actor, FieldError


DEFAULT_BATCH_LIMIT = 200
BATCH_REJECTED_ERROR = "Batch rejected: another record failed."


@dataclass
class RecordResult:
    index: int
    success: bool
    id: int | None = None
    errors: list[FieldError] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "success": self.success,
            "id": self.id,
            "errors": [error.to_dict() for error in self.errors],
        }


@dataclass
class BatchResult:
    results: list[RecordResult]

    @property
    def accepted(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def rejected(self) -> int:
        return len(self.results) - self.accepted

    def to_dict(self) -> dict:
        return {
            "results": [result.to_dict() for result in self.results],
            "accepted": self.accepted,
            "rejected": self.rejected,
        }


def _batch_limit() -> int:
    return int(current_app.config.get("SALES_TRANSACTION_BATCH_LIMIT", DEFAULT_BATCH_LIMIT))


def _validate_batch_shape(payloads: Any) -> None:
    if not isinstance(payloads, list):
        raise ValidationError("records must be a list")
    if not payloads:
        raise ValidationError("records must not be empty")

    limit = _batch_limit()
    if len(payloads) > limit:
        raise ValidationError(f"A batch may contain at most {limit} records")

    for index, payload in enumerate(payloads):
        if not isinstance(payload, dict):
            raise ValidationError(f"Record {index} must be an object")


def _build_candidate(payload: dict, actor: Actor) -> tuple[SalesTransaction, list[FieldError]]:
    """
    Coerce one payload into a transient SalesTransaction.

    Fields that fail validation are left unset and reported; the record
    still goes through the guard so its outcome is complete.
    """
    record = SalesTransaction(created_by_user_id=actor.id)
    errors: list[FieldError] = []

    try:
        record.account_id = coerce_id(payload.get("account_id"), "account_id")
    except ValidationError as exc:
        errors.append(FieldError(exc.field, str(exc)))

    try:
        record.sale_date = coerce_date(payload.get("sale_date"), "sale_date")
    except ValidationError as exc:
        errors.append(FieldError(exc.field, str(exc)))

    try:
        record.amount_cents = coerce_amount_cents(payload.get("amount"), "amount")
    except ValidationError as exc:
        errors.append(FieldError(exc.field, str(exc)))

    return record, errors


def create_transactions(
    payloads: list[dict],
    actor: Actor,
    *,
    permissions: transaction_guard.GrantChecker,
    ownership: transaction_guard.OwnerLookup,
    all_or_none: bool = False,
) -> BatchResult:
    """
    Validate, guard and persist a batch of {account_id, sale_date, amount}.

    Raises ValidationError only for a malformed batch. Per-record problems
    come back in BatchResult.results.
    """
    _validate_batch_shape(payloads)

    candidates = [_build_candidate(payload, actor) for payload in payloads]
    records = [record for record, _ in candidates]

    outcomes = transaction_guard.validate_batch(records, actor, permissions, ownership)

    results = []
    for (record, field_errors), outcome in zip(candidates, outcomes):
        errors = field_errors + list(outcome.errors)
        results.append(RecordResult(index=outcome.record_index, success=not errors, errors=errors))

    accepted = [record for record, result in zip(records, results) if result.success]
    rejected_count = len(results) - len(accepted)

    if all_or_none and rejected_count:
        for result in results:
            if result.success:
                result.success = False
                result.errors.append(FieldError(None, BATCH_REJECTED_ERROR))
        current_app.logger.info(
            "Sales transaction batch rolled back: %d of %d records rejected",
            rejected_count,
            len(results),
        )
        return BatchResult(results=results)

    if accepted:
        db.session.add_all(accepted)
        db.session.commit()

    for record, result in zip(records, results):
        if result.success:
            result.id = record.id

    if rejected_count:
        current_app.logger.warning(
            "Sales transaction batch by user %s: %d accepted, %d rejected",
            actor.id,
            len(accepted),
            rejected_count,
        )
    else:
        current_app.logger.info("Sales transaction batch by user %s: %d accepted", actor.id, len(accepted))

    return BatchResult(results=results)
