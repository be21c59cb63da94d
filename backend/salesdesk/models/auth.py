from __future__ import annotations

from ..extensions import db
from salesdesk.time_utils import to_utc_z

class User(db.Model):
    """
    User accounts for authentication, account ownership, and attribution.

    A user is both the owner identity of accounts and the "sales rep" whose
    owned-account transactions are summarized.

    manager_id is nullable. A user without a manager cannot create sales
    transactions unless they hold the create-on-any-account grant.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.Index("ix_users_manager_id", "manager_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    username = db.Column(db.String(64), nullable=False, unique=True, index=True)
    email = db.Column(db.String(255), nullable=False, unique=True)

    # Display label used by the sales rep picker
    name = db.Column(db.String(128), nullable=False)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    manager_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    manager = db.relationship("User", remote_side=[id], backref=db.backref("direct_reports", lazy=True))

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "name": self.name,
            "manager_id": self.manager_id,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "last_login_at": to_utc_z(self.last_login_at) if self.last_login_at else None,
        }


class Permission(db.Model):
    """
    Named grants (custom permissions) such as "sales-summary-access".

    Grants reach users only through permission sets (PermissionSetGrant).
    """
    __tablename__ = "permissions"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), nullable=False, unique=True, index=True)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(64), nullable=False, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "created_at": to_utc_z(self.created_at),
        }


class PermissionSet(db.Model):
    """
    Bundle of grants plus object- and field-level access.

    A user's effective access is the union over every set assigned to them.
    """
    __tablename__ = "permission_sets"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False, unique=True, index=True)
    label = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "label": self.label,
            "description": self.description,
            "created_at": to_utc_z(self.created_at),
        }


class PermissionSetGrant(db.Model):
    """PermissionSet-Permission association."""
    __tablename__ = "permission_set_grants"
    __table_args__ = (
        db.UniqueConstraint("permission_set_id", "permission_id", name="uq_permission_set_grants"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    permission_set_id = db.Column(db.Integer, db.ForeignKey("permission_sets.id"), nullable=False, index=True)
    permission_id = db.Column(db.Integer, db.ForeignKey("permissions.id"), nullable=False, index=True)

    granted_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    permission_set = db.relationship("PermissionSet", backref=db.backref("grants", lazy=True))
    permission = db.relationship("Permission", backref=db.backref("permission_set_grants", lazy=True))


class ObjectPermission(db.Model):
    """
    Object-level access granted by a permission set.

    No row for an object means no access (deny by default).
    """
    __tablename__ = "object_permissions"
    __table_args__ = (
        db.UniqueConstraint("permission_set_id", "object_name", name="uq_object_permissions"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    permission_set_id = db.Column(db.Integer, db.ForeignKey("permission_sets.id"), nullable=False, index=True)
    object_name = db.Column(db.String(64), nullable=False)
    can_read = db.Column(db.Boolean, nullable=False, default=False)
    can_create = db.Column(db.Boolean, nullable=False, default=False)

    permission_set = db.relationship("PermissionSet", backref=db.backref("object_permissions", lazy=True))

    def to_dict(self) -> dict:
        return {
            "object_name": self.object_name,
            "can_read": self.can_read,
            "can_create": self.can_create,
        }


class FieldPermission(db.Model):
    """Field-level access granted by a permission set."""
    __tablename__ = "field_permissions"
    __table_args__ = (
        db.UniqueConstraint("permission_set_id", "object_name", "field_name", name="uq_field_permissions"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    permission_set_id = db.Column(db.Integer, db.ForeignKey("permission_sets.id"), nullable=False, index=True)
    object_name = db.Column(db.String(64), nullable=False)
    field_name = db.Column(db.String(64), nullable=False)
    can_read = db.Column(db.Boolean, nullable=False, default=False)
    can_edit = db.Column(db.Boolean, nullable=False, default=False)

    permission_set = db.relationship("PermissionSet", backref=db.backref("field_permissions", lazy=True))

    def to_dict(self) -> dict:
        return {
            "object_name": self.object_name,
            "field_name": self.field_name,
            "can_read": self.can_read,
            "can_edit": self.can_edit,
        }


class PermissionSetAssignment(db.Model):
    """User-PermissionSet association."""
    __tablename__ = "permission_set_assignments"
    __table_args__ = (
        db.UniqueConstraint("user_id", "permission_set_id", name="uq_permission_set_assignments"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    permission_set_id = db.Column(db.Integer, db.ForeignKey("permission_sets.id"), nullable=False, index=True)

    assigned_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    user = db.relationship("User", backref=db.backref("permission_set_assignments", lazy=True))
    permission_set = db.relationship("PermissionSet", backref=db.backref("assignments", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "permission_set_id": self.permission_set_id,
            "assigned_at": to_utc_z(self.assigned_at),
        }


class SessionToken(db.Model):
    """
    Bearer session tokens.

    SECURITY NOTES:
    - Tokens stored hashed in database (SHA-256)
    - 24-hour absolute timeout
    - 2-hour idle timeout
    - Revocable on logout or suspicious activity
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.Index("ix_session_tokens_user_active", "user_id", "is_revoked"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # Token hash (never store plaintext tokens!)
    token_hash = db.Column(db.String(255), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_used_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False, index=True)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)
    revoked_reason = db.Column(db.String(255), nullable=True)

    user_agent = db.Column(db.String(512), nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)

    user = db.relationship("User", backref=db.backref("sessions", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "created_at": to_utc_z(self.created_at),
            "last_used_at": to_utc_z(self.last_used_at),
            "expires_at": to_utc_z(self.expires_at),
            "is_revoked": self.is_revoked,
        }
