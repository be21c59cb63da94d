# Overview: Service-layer operations for accounts and account ownership.

from __future__ import annotations

from typing import Iterable

from ..extensions import db
from ..models import Account, User


class AccountError(Exception):
    """Raised for account operation errors."""
    pass


class OwnershipResolver:
    """
    Resolves current account owners with one query per call.

    Ownership is read live, so the answer reflects any transfer committed
    before the call.
    """

    def resolve_owners(self, account_ids: Iterable[int]) -> dict[int, int]:
        ids = {account_id for account_id in account_ids if account_id is not None}
        if not ids:
            return {}

        rows = db.session.query(Account.id, Account.owner_id).filter(Account.id.in_(ids)).all()
        return {row.id: row.owner_id for row in rows}


def _require_user(user_id: int, label: str) -> User:
    user = db.session.query(User).filter_by(id=user_id).first()
    if not user:
        raise AccountError(f"{label} not found")
    return user


def create_account(name: str, owner_id: int) -> Account:
    """Create an account owned by owner_id."""
    name = (name or "").strip()
    if not name:
        raise AccountError("Account name is required")

    _require_user(owner_id, "Owner")

    account = Account(name=name, owner_id=owner_id)
    db.session.add(account)
    db.session.commit()
    return account


def transfer_ownership(account_id: int, new_owner_id: int) -> Account:
    """
    Hand an account to another user.

    Past transactions follow the account: the monthly summary credits the
    new owner for every transaction on it, including ones dated before the
    transfer.
    """
    account = db.session.query(Account).filter_by(id=account_id).first()
    if not account:
        raise AccountError("Account not found")

    _require_user(new_owner_id, "New owner")

    account.owner_id = new_owner_id
    db.session.commit()
    return account


def list_accounts_for_owner(owner_id: int) -> list[Account]:
    return db.session.query(Account).filter_by(owner_id=owner_id).order_by(Account.name.asc()).all()
