# accounts/views.py
import json

from django.http import JsonResponse
from django.middleware.csrf import get_token
from django.utils.translation import gettext as _
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_GET, require_POST

from core.errors import OperationResult, ValidationError
from . import gateway
from .forms import LoginForm, PasswordResetRequestForm, PasswordResetVerifyForm, RegisterForm


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------
def request_data(request) -> dict:
    """Form-encoded or JSON request body as a dict."""
    if request.content_type == "application/json":
        try:
            payload = json.loads(request.body or b"{}")
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}
    return request.POST.dict()


def result_response(result: OperationResult, status: int = None) -> JsonResponse:
    """Map a result onto an HTTP status; the JSON body is always {success, message, ...}."""
    if status is None:
        status = 200 if result.success else {
            "validation": 400,
            "forbidden": 403,
            "not_found": 404,
            "conflict": 409,
        }.get(result.error, 500)
    return JsonResponse(result.as_dict(), status=status)


def form_error_response(form) -> JsonResponse:
    errors = form.errors.get_json_data()
    first = next(iter(errors.values()))[0]["message"] if errors else _("Invalid input.")
    return result_response(OperationResult.fail(ValidationError(first)))


# -------------------------------------------------------------------
# Login / logout
# -------------------------------------------------------------------
@require_GET
@ensure_csrf_cookie
def csrf_view(request):
    """Hand out the CSRF cookie; clients echo it back in the X-CSRFToken header on POST."""
    return result_response(OperationResult.ok(data={"csrf_token": get_token(request)}))


@require_POST
def login_view(request):
    """
    Authenticate against the Login sheet.
    Always start with a clean session, then store email and role on success.
    """
    request.session.flush()

    form = LoginForm(request_data(request))
    if not form.is_valid():
        return form_error_response(form)

    result = gateway.login(form.cleaned_data["email"], form.cleaned_data["password"])
    if result.success:
        request.session["authenticated"] = True
        request.session["email"] = result.data["email"]
        request.session["user_role"] = result.data["role"]
    return result_response(result)


def logout_view(request):
    """Logout the current user and clear session."""
    request.session.flush()
    return result_response(OperationResult.ok(_("Logged out.")))


# -------------------------------------------------------------------
# Registration / password reset
# -------------------------------------------------------------------
@require_POST
def register_view(request):
    form = RegisterForm(request_data(request))
    if not form.is_valid():
        return form_error_response(form)
    result = gateway.register(form.cleaned_data["email"], form.cleaned_data["password"])
    return result_response(result, status=201 if result.success else None)


@require_POST
def password_reset_request_view(request):
    form = PasswordResetRequestForm(request_data(request))
    if not form.is_valid():
        return form_error_response(form)
    return result_response(gateway.request_password_reset(form.cleaned_data["email"]))


@require_POST
def password_reset_verify_view(request):
    form = PasswordResetVerifyForm(request_data(request))
    if not form.is_valid():
        return form_error_response(form)
    result = gateway.verify_and_reset_password(
        form.cleaned_data["email"],
        form.cleaned_data["code"],
        form.cleaned_data["new_password"],
    )
    return result_response(result)
