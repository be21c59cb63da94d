# Overview: Service-layer operations for permission; encapsulates business logic and database work.

"""
Grant, Object and Field Permission Checking with Security Event Logging

WHY: The summary and write paths must check access explicitly in code.
Nothing is enforced declaratively by the database or the ORM.

DESIGN PRINCIPLES:
- Fail closed: Deny by default, require explicit grant via a permission set
- Log denials only: Granted checks are not logged
- Performance: PermissionChecker loads a user's access once and answers
  every later check from memory
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..extensions import db
from ..models import (
    User,
    Permission,
    PermissionSet,
    PermissionSetGrant,
    ObjectPermission,
    FieldPermission,
    PermissionSetAssignment,
    SecurityEvent,
)
from ..permissions import GRANT_DEFINITIONS, DEFAULT_PERMISSION_SETS, validate_grant_code, validate_object_field
from salesdesk.time_utils import utcnow


class PermissionDeniedError(Exception):
    """Raised when user lacks a required grant, object or field permission."""
    pass


def log_security_event(
    user_id: int | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> SecurityEvent:
    """
    Log security event to audit trail.

    event_type examples:
    - PERMISSION_DENIED
    - LOGIN_FAILED
    - LOGOUT
    - PERMISSION_SET_ASSIGNED
    """
    event = SecurityEvent(
        user_id=user_id,
        event_type=event_type,
        resource=resource,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
        occurred_at=utcnow()
    )

    db.session.add(event)
    db.session.commit()

    return event


@dataclass
class UserAccess:
    """Effective access of one user: union over all assigned permission sets."""
    grants: set[str] = field(default_factory=set)
    readable_objects: set[str] = field(default_factory=set)
    creatable_objects: set[str] = field(default_factory=set)
    readable_fields: set[tuple[str, str]] = field(default_factory=set)
    editable_fields: set[tuple[str, str]] = field(default_factory=set)


def load_user_access(user_id: int) -> UserAccess:
    """
    Resolve a user's grants and object/field permissions.

    Three queries total, independent of how many sets the user holds.
    """
    access = UserAccess()

    set_ids = [
        row.permission_set_id
        for row in db.session.query(PermissionSetAssignment.permission_set_id).filter_by(user_id=user_id)
    ]
    if not set_ids:
        return access

    grant_rows = db.session.query(Permission.code).join(
        PermissionSetGrant, PermissionSetGrant.permission_id == Permission.id
    ).filter(PermissionSetGrant.permission_set_id.in_(set_ids)).all()
    access.grants = {row.code for row in grant_rows}

    for obj in db.session.query(ObjectPermission).filter(ObjectPermission.permission_set_id.in_(set_ids)):
        if obj.can_read:
            access.readable_objects.add(obj.object_name)
        if obj.can_create:
            access.creatable_objects.add(obj.object_name)

    for fld in db.session.query(FieldPermission).filter(FieldPermission.permission_set_id.in_(set_ids)):
        key = (fld.object_name, fld.field_name)
        if fld.can_read:
            access.readable_fields.add(key)
        if fld.can_edit:
            access.editable_fields.add(key)

    return access


def get_user_grants(user_id: int) -> set[str]:
    """Get all grant codes for a user (e.g., {"sales-summary-access"})."""
    return load_user_access(user_id).grants


class PermissionChecker:
    """
    Database-backed permission capability bound to one acting user.

    Used by the transaction guard (has_grant) and the sales summary gateway
    (require_* checks). Anything exposing the same methods can stand in
    for it.
    """

    def __init__(
        self,
        user_id: int,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ):
        self.user_id = user_id
        self.ip_address = ip_address
        self.user_agent = user_agent
        self._access: UserAccess | None = None

    @property
    def access(self) -> UserAccess:
        if self._access is None:
            self._access = load_user_access(self.user_id)
        return self._access

    def has_grant(self, grant_code: str) -> bool:
        return grant_code in self.access.grants

    def can_read_object(self, object_name: str) -> bool:
        return object_name in self.access.readable_objects

    def can_create_object(self, object_name: str) -> bool:
        return object_name in self.access.creatable_objects

    def can_read_field(self, object_name: str, field_name: str) -> bool:
        return (object_name, field_name) in self.access.readable_fields

    def can_edit_field(self, object_name: str, field_name: str) -> bool:
        return (object_name, field_name) in self.access.editable_fields

    def _deny(self, resource: str, action: str, reason: str) -> None:
        log_security_event(
            user_id=self.user_id,
            event_type="PERMISSION_DENIED",
            success=False,
            resource=resource,
            action=action,
            reason=reason,
            ip_address=self.ip_address,
            user_agent=self.user_agent,
        )
        raise PermissionDeniedError(reason)

    def require_grant(self, grant_code: str) -> None:
        if not self.has_grant(grant_code):
            self._deny(grant_code, "GRANT", f"Missing grant: {grant_code}")

    def require_read(self, object_name: str, fields: tuple[str, ...] | list[str] = ()) -> None:
        """Require read access on an object and on each listed field."""
        if not self.can_read_object(object_name):
            self._deny(object_name, "READ", f"Missing read access: {object_name}")
        for field_name in fields:
            if not self.can_read_field(object_name, field_name):
                self._deny(
                    f"{object_name}.{field_name}",
                    "READ",
                    f"Missing read access: {object_name}.{field_name}",
                )

    def require_create(self, object_name: str, fields: tuple[str, ...] | list[str] = ()) -> None:
        """Require create access on an object and edit access on each listed field."""
        if not self.can_create_object(object_name):
            self._deny(object_name, "CREATE", f"Missing create access: {object_name}")
        for field_name in fields:
            if not self.can_edit_field(object_name, field_name):
                self._deny(
                    f"{object_name}.{field_name}",
                    "EDIT",
                    f"Missing edit access: {object_name}.{field_name}",
                )


def list_users_with_grant(grant_code: str, *, active_only: bool = True) -> list[User]:
    """
    All users holding a grant through any of their permission sets.

    One query; users holding the grant via several sets appear once.
    """
    query = db.session.query(User).join(
        PermissionSetAssignment, PermissionSetAssignment.user_id == User.id
    ).join(
        PermissionSetGrant, PermissionSetGrant.permission_set_id == PermissionSetAssignment.permission_set_id
    ).join(
        Permission, Permission.id == PermissionSetGrant.permission_id
    ).filter(Permission.code == grant_code)

    if active_only:
        query = query.filter(User.is_active.is_(True))

    return query.distinct().order_by(User.name.asc(), User.id.asc()).all()


def initialize_grants() -> int:
    """
    Create Permission records for all codes in GRANT_DEFINITIONS.

    Idempotent: Safe to run multiple times.
    """
    created_count = 0

    for code, name, description, category in GRANT_DEFINITIONS:
        existing = db.session.query(Permission).filter_by(code=code).first()

        if not existing:
            permission = Permission(
                code=code,
                name=name,
                description=description,
                category=category
            )
            db.session.add(permission)
            created_count += 1

    db.session.commit()
    return created_count


def install_default_permission_sets() -> int:
    """
    Create DEFAULT_PERMISSION_SETS with their grants and object/field access.

    Idempotent: existing sets are topped up, never stripped.
    Returns count of sets created.
    """
    created_count = 0

    for name, definition in DEFAULT_PERMISSION_SETS.items():
        permission_set = db.session.query(PermissionSet).filter_by(name=name).first()
        if not permission_set:
            permission_set = PermissionSet(
                name=name,
                label=definition["label"],
                description=definition["description"],
            )
            db.session.add(permission_set)
            db.session.flush()
            created_count += 1

        for grant_code in definition["grants"]:
            grant_to_permission_set(permission_set.name, grant_code, commit=False)

        for object_name, flags in definition["objects"].items():
            set_object_permission(
                permission_set.name,
                object_name,
                can_read=flags["read"],
                can_create=flags["create"],
                commit=False,
            )

        for object_name, fields in definition["fields"].items():
            for field_name, flags in fields.items():
                set_field_permission(
                    permission_set.name,
                    object_name,
                    field_name,
                    can_read=flags["read"],
                    can_edit=flags["edit"],
                    commit=False,
                )

    db.session.commit()
    return created_count


def _get_permission_set(name: str) -> PermissionSet:
    permission_set = db.session.query(PermissionSet).filter_by(name=name).first()
    if not permission_set:
        raise ValueError(f"Permission set '{name}' not found")
    return permission_set


def grant_to_permission_set(set_name: str, grant_code: str, *, commit: bool = True) -> PermissionSetGrant:
    """Add a grant to a permission set."""
    if not validate_grant_code(grant_code):
        raise ValueError(f"Unknown grant '{grant_code}'")

    permission_set = _get_permission_set(set_name)

    permission = db.session.query(Permission).filter_by(code=grant_code).first()
    if not permission:
        raise ValueError(f"Grant '{grant_code}' not found")

    existing = db.session.query(PermissionSetGrant).filter_by(
        permission_set_id=permission_set.id,
        permission_id=permission.id
    ).first()

    if existing:
        return existing  # Already granted

    link = PermissionSetGrant(permission_set_id=permission_set.id, permission_id=permission.id)
    db.session.add(link)
    if commit:
        db.session.commit()
    else:
        db.session.flush()
    return link


def set_object_permission(
    set_name: str,
    object_name: str,
    *,
    can_read: bool,
    can_create: bool,
    commit: bool = True,
) -> ObjectPermission:
    if not validate_object_field(object_name):
        raise ValueError(f"Unknown object '{object_name}'")

    permission_set = _get_permission_set(set_name)
    row = db.session.query(ObjectPermission).filter_by(
        permission_set_id=permission_set.id,
        object_name=object_name,
    ).first()

    if row:
        row.can_read = row.can_read or can_read
        row.can_create = row.can_create or can_create
    else:
        row = ObjectPermission(
            permission_set_id=permission_set.id,
            object_name=object_name,
            can_read=can_read,
            can_create=can_create,
        )
        db.session.add(row)

    if commit:
        db.session.commit()
    else:
        db.session.flush()
    return row


def set_field_permission(
    set_name: str,
    object_name: str,
    field_name: str,
    *,
    can_read: bool,
    can_edit: bool,
    commit: bool = True,
) -> FieldPermission:
    if not validate_object_field(object_name, field_name):
        raise ValueError(f"Unknown field '{object_name}.{field_name}'")

    permission_set = _get_permission_set(set_name)
    row = db.session.query(FieldPermission).filter_by(
        permission_set_id=permission_set.id,
        object_name=object_name,
        field_name=field_name,
    ).first()

    if row:
        row.can_read = row.can_read or can_read
        row.can_edit = row.can_edit or can_edit
    else:
        row = FieldPermission(
            permission_set_id=permission_set.id,
            object_name=object_name,
            field_name=field_name,
            can_read=can_read,
            can_edit=can_edit,
        )
        db.session.add(row)

    if commit:
        db.session.commit()
    else:
        db.session.flush()
    return row


def assign_permission_set(user_id: int, set_name: str) -> PermissionSetAssignment:
    """Assign a permission set to a user."""
    permission_set = _get_permission_set(set_name)

    existing = db.session.query(PermissionSetAssignment).filter_by(
        user_id=user_id,
        permission_set_id=permission_set.id
    ).first()

    if existing:
        return existing

    assignment = PermissionSetAssignment(user_id=user_id, permission_set_id=permission_set.id)
    db.session.add(assignment)
    db.session.commit()
    return assignment


def unassign_permission_set(user_id: int, set_name: str) -> bool:
    """Remove a permission set from a user. Returns False if it wasn't assigned."""
    permission_set = _get_permission_set(set_name)

    assignment = db.session.query(PermissionSetAssignment).filter_by(
        user_id=user_id,
        permission_set_id=permission_set.id
    ).first()

    if not assignment:
        return False

    db.session.delete(assignment)
    db.session.commit()
    return True


def get_user_permission_set_names(user_id: int) -> list[str]:
    """Get list of permission set names for a user."""
    rows = db.session.query(PermissionSet.name).join(
        PermissionSetAssignment, PermissionSetAssignment.permission_set_id == PermissionSet.id
    ).filter(PermissionSetAssignment.user_id == user_id).order_by(PermissionSet.name.asc()).all()
    return [row.name for row in rows]
