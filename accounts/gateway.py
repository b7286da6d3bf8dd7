# accounts/gateway.py
import hashlib
import hmac
import logging
import secrets

import bcrypt
from django.conf import settings
from django.core.mail import send_mail
from django.utils.translation import gettext as _

from accounts.models import ROLE_USER, Account, normalize_email
from core import queries
from core.errors import (
    AuthorizationError, NotFoundError, OperationResult, ServerError,
    ValidationError, guarded, server_error_message,
)
from core.sheet_store import get_store
from utils.validators import validate_email, validate_password

logger = logging.getLogger(__name__)

LEGACY_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


# -------------------------------------------------------------------
# Password hashing
# -------------------------------------------------------------------
def hash_password(password: str) -> str:
    """SHA-256 hex digest of the password (deterministic, 64 chars)."""
    return hashlib.sha256(str(password).encode("utf-8")).hexdigest()


def check_password(password: str, stored_hash: str) -> bool:
    """
    Compare a candidate password against the stored hash.
    Rows carried over from the bcrypt-based user table are still accepted.
    """
    if not stored_hash:
        return False
    if stored_hash.startswith(LEGACY_BCRYPT_PREFIXES):
        try:
            return bcrypt.checkpw(str(password).encode("utf-8"), stored_hash.encode("utf-8"))
        except ValueError:
            logger.warning("Malformed bcrypt hash in Login sheet")
            return False
    return hmac.compare_digest(hash_password(password).encode("utf-8"), stored_hash.strip().lower().encode("utf-8"))


def generate_otp(length: int = None) -> str:
    """Numeric one-time code, zero-padded to a fixed length."""
    length = length or settings.RECORDS_OTP_LENGTH
    return str(secrets.randbelow(10 ** length)).zfill(length)


# -------------------------------------------------------------------
# Role lookup
# -------------------------------------------------------------------
def is_admin(email: str, store=None) -> bool:
    """Pure lookup; a missing account (or an unreadable sheet) means False."""
    try:
        account = queries.get_account_by_email(email, store=store)
    except Exception:
        logger.exception("Role lookup failed for %s", email)
        return False
    return bool(account and account.is_admin)


# -------------------------------------------------------------------
# Login / Register
# -------------------------------------------------------------------
@guarded
def login(email: str, password: str, store=None) -> OperationResult:
    if not str(email or "").strip() or not password:
        raise ValidationError(_("Please enter your email and password."))
    account = queries.get_account_by_email(email, store=store)
    if account is None:
        raise AuthorizationError(_("No account exists for this email."))
    if not check_password(password, account.password_hash):
        raise AuthorizationError(_("Incorrect password."))
    return OperationResult.ok(
        _("Login successful."),
        data={"authenticated": True, "email": account.email, "role": account.role},
    )


@guarded
def register(email: str, password: str, store=None) -> OperationResult:
    email = validate_email(email)
    validate_password(password)
    store = store or get_store()
    with store.transaction():
        if queries.find_account(email, store=store):
            raise ValidationError(_("An account with this email already exists."), field="email")
        queries.add_account(
            Account(email=email, password_hash=hash_password(password), role=ROLE_USER),
            store=store,
        )
    logger.info("Registered account %s", email)
    return OperationResult.ok(_("Account created. You can now log in."))


# -------------------------------------------------------------------
# Password reset
# -------------------------------------------------------------------
def send_otp_email(email: str, code: str):
    """Deliver the reset code; any delivery failure surfaces as ServerError."""
    subject = _("Your password reset code")
    body = _("Your password reset code is: %(code)s") % {"code": code}
    try:
        send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [email], fail_silently=False)
    except Exception as exc:
        logger.exception("Could not send reset code to %s", email)
        raise ServerError(server_error_message()) from exc


@guarded
def request_password_reset(email: str, store=None) -> OperationResult:
    store = store or get_store()
    with store.transaction():
        found = queries.find_account(email, store=store)
        if found is None:
            raise NotFoundError(_("No account exists for this email."))
        row_number, account = found
        account.otp_code = generate_otp()
        queries.save_account(row_number, account, store=store)
    send_otp_email(account.email, account.otp_code)
    return OperationResult.ok(_("A reset code has been sent to your email."))


@guarded
def verify_and_reset_password(email: str, code: str, new_password: str, store=None) -> OperationResult:
    validate_password(new_password)
    store = store or get_store()
    with store.transaction():
        found = queries.find_account(email, store=store)
        if found is None:
            raise NotFoundError(_("No account exists for this email."))
        row_number, account = found
        supplied = str(code or "").strip().encode("utf-8")
        expected = (account.otp_code or "").encode("utf-8")
        if not expected or not supplied or not hmac.compare_digest(supplied, expected):
            raise AuthorizationError(_("The reset code is invalid."))
        # New hash and cleared code land in the same row write
        account.password_hash = hash_password(new_password)
        account.otp_code = None
        queries.save_account(row_number, account, store=store)
    logger.info("Password reset for %s", normalize_email(email))
    return OperationResult.ok(_("Your password has been reset."))
