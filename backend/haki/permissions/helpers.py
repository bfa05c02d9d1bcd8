# Overview: Utility functions for permission lookups and validation.

from .definitions import PERMISSION_DEFINITIONS


def get_all_permission_codes():
    """Get list of all permission codes."""
    return [perm[0] for perm in PERMISSION_DEFINITIONS]


def get_permission_definition(code):
    """Get full definition for a permission code."""
    for perm in PERMISSION_DEFINITIONS:
        if perm[0] == code:
            return {
                "code": perm[0],
                "name": perm[1],
                "description": perm[2],
                "category": perm[3],
            }
    return None


def list_permission_definitions():
    return [get_permission_definition(perm[0]) for perm in PERMISSION_DEFINITIONS]


def validate_permission_code(code):
    """Check if a permission code is valid."""
    return code in get_all_permission_codes()
