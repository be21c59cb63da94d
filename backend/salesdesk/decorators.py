# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import session_service, permission_service
from .services.transaction_guard import Actor


def require_auth(f):
    """
    Require a valid bearer session.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.actor: Actor (id, manager_id) for the write path
    - g.permissions: PermissionChecker bound to the user

    SECURITY: Returns 401 if:
    - No Authorization header
    - Invalid, expired or revoked token
    - User account deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"error": "Authentication required"}), 401

        token = auth_header.split(" ", 1)[1]

        user = session_service.validate_session(token)

        if not user:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = user
        g.actor = Actor.from_user(user)
        g.permissions = permission_service.PermissionChecker(
            user.id,
            ip_address=request.remote_addr,
            user_agent=request.headers.get("User-Agent"),
        )
        g.session_token = token

        return f(*args, **kwargs)

    return decorated_function
