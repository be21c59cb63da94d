# Overview: Creation guard for sales transactions; decides per record whether the actor may create it.

"""
Creation guard for sales transactions.

Runs over a whole batch of candidate records before anything is written and
decides, per record, whether the acting user may create it:

1. Holders of the create-on-any-account grant pass unconditionally. No
   ownership lookup and no manager check happen for them.
2. Otherwise account owners are resolved with ONE batched lookup covering
   every distinct account in the batch.
3. A record whose account is owned by someone else gets the ownership error
   on its account_id field. Other records are unaffected.
4. An actor without a manager gets the manager-policy error on every record,
   including records on accounts they own.

Rejections are returned as data, never raised, so callers can persist the
accepted part of a batch.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence

from ..permissions import CREATE_ON_ANY_ACCOUNT


OWNERSHIP_ERROR = "You can only create a Sales Transaction for an Account you own."
MANAGER_REQUIRED_ERROR = "You must have a manager assigned to create a Sales Transaction."


class GrantChecker(Protocol):
    def has_grant(self, grant_code: str) -> bool: ...


class OwnerLookup(Protocol):
    def resolve_owners(self, account_ids: Iterable[int]) -> dict[int, int]: ...


class CandidateRecord(Protocol):
    account_id: int | None


@dataclass(frozen=True)
class Actor:
    """The user attempting the write."""
    id: int
    manager_id: int | None = None

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(id=user.id, manager_id=user.manager_id)


@dataclass(frozen=True)
class FieldError:
    field: str | None
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


@dataclass(frozen=True)
class GuardOutcome:
    record_index: int
    errors: tuple[FieldError, ...] = ()

    @property
    def rejected(self) -> bool:
        return bool(self.errors)

    @property
    def message(self) -> str | None:
        if not self.errors:
            return None
        return " ".join(error.message for error in self.errors)


def validate_batch(
    records: Sequence[CandidateRecord],
    actor: Actor,
    permissions: GrantChecker,
    ownership: OwnerLookup,
) -> list[GuardOutcome]:
    """Return one GuardOutcome per record, in input order."""
    if permissions.has_grant(CREATE_ON_ANY_ACCOUNT):
        return [GuardOutcome(record_index=index) for index in range(len(records))]

    account_ids = {record.account_id for record in records if record.account_id is not None}
    owners = ownership.resolve_owners(account_ids) if account_ids else {}

    outcomes = []
    for index, record in enumerate(records):
        errors = []
        if record.account_id is not None and owners.get(record.account_id) != actor.id:
            errors.append(FieldError("account_id", OWNERSHIP_ERROR))
        if actor.manager_id is None:
            errors.append(FieldError(None, MANAGER_REQUIRED_ERROR))
        outcomes.append(GuardOutcome(record_index=index, errors=tuple(errors)))

    return outcomes
