"""
manager.py

In-memory one-time passcode store.

Codes are keyed by (subject, purpose). Generating or resending always
replaces the record for that key. Validation outcomes are returned as
ValidationResult values; only a missing subject or purpose raises.

The store lives in the OTPManager instance. Nothing is persisted, so a
restart invalidates every outstanding code. Expiry is evaluated lazily
when a record is read.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple
import hmac
import logging
import secrets
import threading

from .config import (
    ALPHANUMERIC_ALPHABET,
    NUMERIC_ALPHABET,
    OTPConfig,
    OTPType,
    config_for_purpose,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class MissingParameterError(ValueError):
    """Subject or purpose was empty."""


@dataclass
class OTPRecord:
    subject: str
    purpose: str
    code: str
    created_at: datetime
    expires_at: datetime
    attempts: int
    max_attempts: int
    type: OTPType
    length: int
    used: bool = False

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    @property
    def attempts_remaining(self) -> int:
        return max(0, self.max_attempts - self.attempts)


@dataclass
class ValidationResult:
    valid: bool
    message: str
    remaining_attempts: Optional[int] = None


@dataclass
class OTPStatus:
    exists: bool = False
    expires_at: Optional[datetime] = None
    max_attempts: int = 0
    attempts_remaining: int = 0
    used: bool = False


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_code(length: int, otp_type: OTPType = OTPType.NUMERIC) -> str:
    alphabet = ALPHANUMERIC_ALPHABET if otp_type is OTPType.ALPHANUMERIC else NUMERIC_ALPHABET
    return "".join(secrets.choice(alphabet) for _ in range(length))


def _require(subject: str, purpose: str) -> None:
    missing = [name for name, value in (("subject", subject), ("purpose", purpose)) if not value]
    if missing:
        raise MissingParameterError(f"{' and '.join(missing)} required")


class OTPManager:
    """
    Issues and validates one-time passcodes.

    A single lock guards the record map, so the check-compare-increment
    sequence of validate() is atomic and concurrent wrong guesses cannot
    exceed the attempt budget.

    Args:
        clock: returns the current time as an aware datetime (UTC by default)
    """
    def __init__(self, clock: Optional[Clock] = None):
        self._clock: Clock = clock or _utcnow
        self._records: Dict[Tuple[str, str], OTPRecord] = {}
        self._lock = threading.Lock()

    def generate(self, subject: str, purpose: str, config: Optional[OTPConfig] = None) -> str:
        """
        Issue a fresh code for (subject, purpose), replacing any previous
        record whatever its state. Without a config the purpose's default
        policy applies. Returns the code.
        """
        _require(subject, purpose)
        cfg = config or config_for_purpose(purpose)
        if cfg.length < 1 or cfg.max_attempts < 1 or cfg.expires_in <= 0:
            raise ValueError(f"Invalid OTP config: {cfg}")

        otp_type = OTPType(cfg.type)
        code = generate_code(cfg.length, otp_type)

        with self._lock:
            now = self._clock()
            self._records[(subject, purpose)] = OTPRecord(
                subject=subject,
                purpose=purpose,
                code=code,
                created_at=now,
                expires_at=now + timedelta(minutes=cfg.expires_in),
                attempts=0,
                max_attempts=cfg.max_attempts,
                type=otp_type,
                length=cfg.length,
            )
            self._purge_expired(now)

        logger.info(f"OTP issued for purpose '{purpose}' (expires in {cfg.expires_in} min, {cfg.max_attempts} attempts)")
        return code

    def resend(self, subject: str, purpose: str, config: Optional[OTPConfig] = None) -> str:
        """Issue a fresh code, resetting attempts. Same policy rules as generate()."""
        return self.generate(subject, purpose, config)

    def validate(self, subject: str, purpose: str, code: str) -> ValidationResult:
        _require(subject, purpose)
        submitted = (code or "").encode("utf-8")

        with self._lock:
            record = self._records.get((subject, purpose))

            if record is None:
                return ValidationResult(False, "OTP not found or expired")

            if record.is_expired(self._clock()):
                return ValidationResult(False, "OTP has expired")

            if record.used:
                return ValidationResult(False, "OTP has already been used")

            if record.attempts >= record.max_attempts:
                return ValidationResult(
                    False, "Maximum attempts exceeded. Please request a new OTP", remaining_attempts=0
                )

            if hmac.compare_digest(submitted, record.code.encode("utf-8")):
                record.used = True
                logger.info(f"OTP validated for purpose '{purpose}'")
                return ValidationResult(True, "OTP validated successfully")

            record.attempts += 1
            remaining = record.attempts_remaining

        logger.info(f"OTP mismatch for purpose '{purpose}', {remaining} attempts remaining")
        return ValidationResult(False, f"Invalid OTP. {remaining} attempts remaining", remaining_attempts=remaining)

    def get_status(self, subject: str, purpose: str) -> OTPStatus:
        """Snapshot for countdowns; zeroed defaults when no record exists."""
        with self._lock:
            record = self._records.get((subject, purpose))
            if record is None:
                return OTPStatus()
            return OTPStatus(
                exists=True,
                expires_at=record.expires_at,
                max_attempts=record.max_attempts,
                attempts_remaining=record.attempts_remaining,
                used=record.used,
            )

    def revoke(self, subject: str, purpose: str) -> bool:
        with self._lock:
            return self._records.pop((subject, purpose), None) is not None

    def cleanup_expired(self) -> int:
        """Drop expired records. Returns how many were removed."""
        with self._lock:
            return self._purge_expired(self._clock())

    def active_records(self) -> List[OTPRecord]:
        """Unexpired, unused records with attempts left."""
        with self._lock:
            now = self._clock()
            return [
                r for r in self._records.values()
                if not r.is_expired(now) and not r.used and r.attempts < r.max_attempts
            ]

    def size(self) -> int:
        with self._lock:
            return len(self._records)

    def _purge_expired(self, now: datetime) -> int:
        expired = [key for key, r in self._records.items() if r.is_expired(now)]
        for key in expired:
            del self._records[key]
        return len(expired)
