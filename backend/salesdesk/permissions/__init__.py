# Overview: Permission system package.
# Re-exports all public APIs for convenient imports.

from .categories import PermissionCategory
from .definitions import (
    SALES_SUMMARY_ACCESS,
    CREATE_ON_ANY_ACCOUNT,
    GRANT_DEFINITIONS,
    SALES_GRANTS,
    ADMINISTRATION_GRANTS,
    SALES_TRANSACTION,
    SALES_TRANSACTION_FIELDS,
    ACCOUNT,
    USER,
    SECURED_OBJECTS,
    DEFAULT_PERMISSION_SETS,
)
from .helpers import (
    get_all_grant_codes,
    get_grants_by_category,
    validate_grant_code,
    validate_object_field,
)

__all__ = [
    "PermissionCategory",
    "SALES_SUMMARY_ACCESS",
    "CREATE_ON_ANY_ACCOUNT",
    "GRANT_DEFINITIONS",
    "SALES_GRANTS",
    "ADMINISTRATION_GRANTS",
    "SALES_TRANSACTION",
    "SALES_TRANSACTION_FIELDS",
    "ACCOUNT",
    "USER",
    "SECURED_OBJECTS",
    "DEFAULT_PERMISSION_SETS",
    "get_all_grant_codes",
    "get_grants_by_category",
    "validate_grant_code",
    "validate_object_field",
]
