# config.py — one-time passcode policies

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class OTPType(str, Enum):
    NUMERIC = "numeric"
    ALPHANUMERIC = "alphanumeric"


NUMERIC_ALPHABET = "0123456789"
ALPHANUMERIC_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"


@dataclass(frozen=True)
class OTPConfig:
    length: int = 6
    expires_in: int = 10          # minutes
    max_attempts: int = 3
    type: OTPType = OTPType.NUMERIC

    def merged(self, **overrides) -> "OTPConfig":
        """Copy with the given non-None fields replaced."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


EMAIL_VERIFICATION = "email-verification"
PASSWORD_RESET = "password-reset"
PHONE_VERIFICATION = "phone-verification"
TRANSACTION_VERIFICATION = "transaction-verification"
ADMIN_ACCESS = "admin-access"

# transaction codes are tighter than email codes; admin codes are single-shot
PURPOSE_DEFAULTS = {
    EMAIL_VERIFICATION: OTPConfig(length=6, expires_in=15, max_attempts=3, type=OTPType.NUMERIC),
    PASSWORD_RESET: OTPConfig(length=6, expires_in=30, max_attempts=5, type=OTPType.NUMERIC),
    PHONE_VERIFICATION: OTPConfig(length=6, expires_in=10, max_attempts=3, type=OTPType.NUMERIC),
    TRANSACTION_VERIFICATION: OTPConfig(length=6, expires_in=5, max_attempts=2, type=OTPType.NUMERIC),
    ADMIN_ACCESS: OTPConfig(length=8, expires_in=5, max_attempts=1, type=OTPType.ALPHANUMERIC),
}

# purposes outside the table
CUSTOM_NUMERIC_LENGTH = 6
CUSTOM_ALPHANUMERIC_LENGTH = 8
CUSTOM_EXPIRES_IN = 10
CUSTOM_MAX_ATTEMPTS = 3

# transaction codes are keyed per transaction
TRANSACTION_PURPOSE_PREFIX = "transaction-"


def config_for_purpose(purpose: str, otp_type: Optional[str] = None) -> OTPConfig:
    """
    Policy for a purpose. Known purposes use PURPOSE_DEFAULTS (otp_type is
    ignored); others get the custom policy, 8 characters when alphanumeric.
    Purposes of the form 'transaction-<id>' use the transaction policy.
    """
    if purpose in PURPOSE_DEFAULTS:
        return PURPOSE_DEFAULTS[purpose]
    if purpose.startswith(TRANSACTION_PURPOSE_PREFIX):
        return PURPOSE_DEFAULTS[TRANSACTION_VERIFICATION]

    kind = OTPType(otp_type) if otp_type else OTPType.NUMERIC
    length = CUSTOM_ALPHANUMERIC_LENGTH if kind is OTPType.ALPHANUMERIC else CUSTOM_NUMERIC_LENGTH
    return OTPConfig(
        length=length,
        expires_in=CUSTOM_EXPIRES_IN,
        max_attempts=CUSTOM_MAX_ATTEMPTS,
        type=kind,
    )
