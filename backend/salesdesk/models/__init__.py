from .auth import (
    User,
    Permission,
    PermissionSet,
    PermissionSetGrant,
    ObjectPermission,
    FieldPermission,
    PermissionSetAssignment,
    SessionToken,
)
from .accounts import Account
from .sales import SalesTransaction
from .security import SecurityEvent

__all__ = [
    'User', 'Permission', 'PermissionSet', 'PermissionSetGrant',
    'ObjectPermission', 'FieldPermission', 'PermissionSetAssignment', 'SessionToken',
    'Account',
    'SalesTransaction',
    'SecurityEvent',
]
