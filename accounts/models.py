# accounts/models.py

from dataclasses import dataclass
from typing import Optional

ROLE_ADMIN = "Admin"
ROLE_USER = "User"
ROLES = (ROLE_ADMIN, ROLE_USER)


def normalize_email(email) -> str:
    """Emails are compared trimmed and case-insensitive."""
    return str(email or "").strip().lower()


def normalize_role(role) -> str:
    """Anything that is not 'Admin' is treated as a regular user."""
    return ROLE_ADMIN if str(role or "").strip().lower() == "admin" else ROLE_USER


@dataclass
class Account:
    """
    A row of the Login sheet.
    password_hash is a hex digest (or a legacy bcrypt hash), never plaintext.
    """
    email: str
    password_hash: str
    role: str = ROLE_USER
    otp_code: Optional[str] = None

    @classmethod
    def from_row(cls, values) -> "Account":
        values = list(values or []) + [None] * 4
        email, password_hash, role, otp = values[:4]
        otp = str(otp).strip() if otp not in (None, "") else None
        # Codes typed into the sheet by hand come back as numbers
        if otp and otp.endswith(".0"):
            otp = otp[:-2]
        return cls(
            email=normalize_email(email),
            password_hash=str(password_hash or ""),
            role=normalize_role(role),
            otp_code=otp,
        )

    def to_row(self) -> list:
        return [self.email, self.password_hash, self.role, self.otp_code or ""]

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
