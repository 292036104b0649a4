from functools import wraps
from flask_login import current_user
from logistics.errors import AuthorizationError


def roles_required(*roles):
    """Decorator to restrict a view to the given user roles.

    Use below ``login_required`` so anonymous users get a 401 first.

    Args:
        roles: Role names allowed to call the view

    Returns:
        decorator: The view decorator

    Raises:
        AuthorizationError: If the current user's role is not listed
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated or current_user.role not in roles:
                raise AuthorizationError('Insufficient permissions')
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def admin_required(f):
    """Decorator to restrict access to admin users only."""
    return roles_required('admin')(f)
