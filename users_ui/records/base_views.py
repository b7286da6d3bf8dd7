from functools import wraps

from django.http import JsonResponse
from django.utils.translation import gettext as _

from accounts.models import ROLE_ADMIN, normalize_role


def session_view(admin_only=False):
    """
    Decorator for record views that handles common functionality:
    - Ensures the requester is logged in (401 otherwise)
    - Optionally requires the Admin role from the session (403 otherwise)
    - Passes the requester's email and role to the view
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped_view(request, *args, **kwargs):
            is_authenticated = request.session.get("authenticated", False)
            email = request.session.get("email", "")
            role = normalize_role(request.session.get("user_role", ""))

            if not is_authenticated or not email:
                return JsonResponse(
                    {"success": False, "message": _("Please log in first."), "error": "unauthenticated"},
                    status=401,
                )

            if admin_only and role != ROLE_ADMIN:
                return JsonResponse(
                    {"success": False, "message": _("You are not allowed to modify records."), "error": "forbidden"},
                    status=403,
                )

            return view_func(request, email, role, *args, **kwargs)

        return _wrapped_view
    return decorator
