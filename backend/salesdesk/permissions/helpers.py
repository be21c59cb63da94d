# Overview: Utility functions for grant lookups and secured-object validation.

from .definitions import GRANT_DEFINITIONS, SECURED_OBJECTS


def get_all_grant_codes():
    """Get list of all grant codes."""
    return [grant[0] for grant in GRANT_DEFINITIONS]


def get_grants_by_category(category):
    """Get all grants in a category."""
    return [grant for grant in GRANT_DEFINITIONS if grant[3] == category]


def validate_grant_code(code):
    """Check if a grant code is valid."""
    return code in get_all_grant_codes()


def validate_object_field(object_name, field_name=None):
    """Check if an object (and optionally one of its fields) is secured."""
    if object_name not in SECURED_OBJECTS:
        return False
    if field_name is None:
        return True
    return field_name in SECURED_OBJECTS[object_name]
