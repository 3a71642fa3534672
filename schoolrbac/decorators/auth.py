from functools import wraps
from flask import abort
from flask_jwt_extended import verify_jwt_in_request
from schoolrbac.services.policy import actor_can, current_actor


def require_access(sub_module_key: str, category_key: str, kind: str):
    """Gate a view on the acting staff member's resolved access to one pair.

    Principals pass every gate; everyone else needs the override or role
    grant for (sub_module_key, category_key) with the given kind.
    """
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            if not actor_can(current_actor(), sub_module_key, category_key, kind):
                abort(403, description='Access denied')
            return fn(*args, **kwargs)
        return wrapper
    return outer
