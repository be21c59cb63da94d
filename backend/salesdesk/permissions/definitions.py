# Overview: Named grants, secured objects/fields, and default permission sets.
# Each grant is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- GRANTS --

SALES_SUMMARY_ACCESS = "sales-summary-access"
CREATE_ON_ANY_ACCOUNT = "create-on-any-account"

SALES_GRANTS = [
    (
        SALES_SUMMARY_ACCESS,
        "Sales Summary Access",
        "Use the monthly sales summary and appear in its sales rep list",
        PermissionCategory.SALES,
    ),
]

ADMINISTRATION_GRANTS = [
    (
        CREATE_ON_ANY_ACCOUNT,
        "Create On Any Account",
        "Create sales transactions on accounts owned by other users (skips ownership and manager checks)",
        PermissionCategory.ADMINISTRATION,
    ),
]

GRANT_DEFINITIONS = SALES_GRANTS + ADMINISTRATION_GRANTS


# -- SECURED OBJECTS --
# Object name -> fields subject to field-level security.

SALES_TRANSACTION = "sales_transaction"
ACCOUNT = "account"
USER = "user"

SALES_TRANSACTION_FIELDS = ("account_id", "sale_date", "amount")

SECURED_OBJECTS = {
    SALES_TRANSACTION: SALES_TRANSACTION_FIELDS,
    ACCOUNT: ("name", "owner_id"),
    USER: ("name",),
}


# -- DEFAULT PERMISSION SETS --
# name -> label, description, grants, object access, field access
#   objects: {object: {"read": bool, "create": bool}}
#   fields:  {object: {field: {"read": bool, "edit": bool}}}

_SALES_SUMMARY_OBJECTS = {
    SALES_TRANSACTION: {"read": True, "create": True},
    ACCOUNT: {"read": True, "create": False},
    USER: {"read": True, "create": False},
}

_SALES_SUMMARY_FIELDS = {
    SALES_TRANSACTION: {field: {"read": True, "edit": True} for field in SALES_TRANSACTION_FIELDS},
    ACCOUNT: {
        "name": {"read": True, "edit": False},
        "owner_id": {"read": True, "edit": False},
    },
    USER: {"name": {"read": True, "edit": False}},
}

DEFAULT_PERMISSION_SETS = {
    "sales_summary_access": {
        "label": "Sales Summary Access",
        "description": "Sales reps: record sales on owned accounts and view the monthly summary",
        "grants": [SALES_SUMMARY_ACCESS],
        "objects": _SALES_SUMMARY_OBJECTS,
        "fields": _SALES_SUMMARY_FIELDS,
    },
    "sales_admin": {
        "label": "Sales Administrator",
        "description": "Sales operations: record sales on any account",
        "grants": [SALES_SUMMARY_ACCESS, CREATE_ON_ANY_ACCOUNT],
        "objects": _SALES_SUMMARY_OBJECTS,
        "fields": _SALES_SUMMARY_FIELDS,
    },
}
