"""
Tests for the one-time passcode store and its policies.
"""

import threading

import pytest

from storefront.otp.config import (
    PURPOSE_DEFAULTS,
    OTPConfig,
    OTPType,
    config_for_purpose,
)
from storefront.otp.manager import MissingParameterError, OTPStatus, generate_code


def wrong_code(code):
    """A code of the same shape that differs from `code`."""
    return ("1" if code[0] != "1" else "2") + code[1:]


class TestPolicies:
    @pytest.mark.parametrize(
        "purpose, length, expires_in, max_attempts, otp_type",
        [
            ("email-verification", 6, 15, 3, OTPType.NUMERIC),
            ("password-reset", 6, 30, 5, OTPType.NUMERIC),
            ("phone-verification", 6, 10, 3, OTPType.NUMERIC),
            ("transaction-verification", 6, 5, 2, OTPType.NUMERIC),
            ("admin-access", 8, 5, 1, OTPType.ALPHANUMERIC),
        ],
    )
    def test_purpose_defaults(self, purpose, length, expires_in, max_attempts, otp_type):
        assert config_for_purpose(purpose) == OTPConfig(length, expires_in, max_attempts, otp_type)

    def test_transaction_keys_use_transaction_policy(self):
        assert config_for_purpose("transaction-abc123") == PURPOSE_DEFAULTS["transaction-verification"]

    def test_custom_purposes(self):
        assert config_for_purpose("newsletter") == OTPConfig(6, 10, 3, OTPType.NUMERIC)
        assert config_for_purpose("newsletter", "alphanumeric") == OTPConfig(8, 10, 3, OTPType.ALPHANUMERIC)

    def test_merged(self):
        cfg = OTPConfig().merged(length=4, max_attempts=None)
        assert cfg.length == 4
        assert cfg.max_attempts == 3


class TestGenerateCode:
    def test_numeric(self):
        code = generate_code(6)
        assert len(code) == 6 and code.isdigit()

    def test_alphanumeric(self):
        code = generate_code(32, OTPType.ALPHANUMERIC)
        assert len(code) == 32 and code.isascii() and code.isalnum()


class TestOTPManager:
    def test_correct_code_validates_once(self, otp_manager):
        code = otp_manager.generate("user1", "email-verification", OTPConfig())
        result = otp_manager.validate("user1", "email-verification", code)
        assert result.valid
        assert result.message == "OTP validated successfully"

        again = otp_manager.validate("user1", "email-verification", code)
        assert not again.valid
        assert again.message == "OTP has already been used"

    def test_password_reset_scenario(self, otp_manager):
        code = otp_manager.generate("user1", "password-reset")
        assert len(code) == 6 and code.isdigit()
        assert otp_manager.get_status("user1", "password-reset").max_attempts == 5

        for _ in range(3):
            result = otp_manager.validate("user1", "password-reset", wrong_code(code))
        assert not result.valid
        assert result.remaining_attempts == 2
        assert result.message == "Invalid OTP. 2 attempts remaining"

    def test_exhausted_record_rejects_correct_code(self, otp_manager):
        code = otp_manager.generate("user1", "login", OTPConfig(max_attempts=3))
        for _ in range(3):
            assert not otp_manager.validate("user1", "login", wrong_code(code)).valid

        result = otp_manager.validate("user1", "login", code)
        assert not result.valid
        assert result.message.startswith("Maximum attempts exceeded")
        assert result.remaining_attempts == 0

    def test_expired_record_rejects_correct_code(self, otp_manager, clock):
        code = otp_manager.generate("user1", "phone-verification")
        clock.advance(minutes=10, seconds=1)

        result = otp_manager.validate("user1", "phone-verification", code)
        assert not result.valid
        assert result.message == "OTP has expired"
        assert otp_manager.get_status("user1", "phone-verification").attempts_remaining == 3

    def test_valid_until_expiry_instant(self, otp_manager, clock):
        code = otp_manager.generate("user1", "phone-verification")
        clock.advance(minutes=10)
        assert otp_manager.validate("user1", "phone-verification", code).valid

    def test_unknown_record(self, otp_manager):
        result = otp_manager.validate("nobody", "login", "123456")
        assert not result.valid
        assert result.message == "OTP not found or expired"
        assert result.remaining_attempts is None

    def test_generate_replaces_record_and_resets_attempts(self, otp_manager):
        first = otp_manager.generate("user1", "login")
        otp_manager.validate("user1", "login", wrong_code(first))
        otp_manager.validate("user1", "login", wrong_code(first))
        assert otp_manager.get_status("user1", "login").attempts_remaining == 1

        second = otp_manager.resend("user1", "login")
        assert otp_manager.get_status("user1", "login").attempts_remaining == 3
        assert otp_manager.validate("user1", "login", second).valid
        assert otp_manager.size() == 1

    def test_expired_record_can_be_regenerated(self, otp_manager, clock):
        otp_manager.generate("user1", "login")
        clock.advance(minutes=30)
        code = otp_manager.resend("user1", "login")
        assert otp_manager.validate("user1", "login", code).valid

    def test_keys_are_independent(self, otp_manager):
        a = otp_manager.generate("user1", "login")
        b = otp_manager.generate("user1", "admin-access")
        assert len(b) == 8
        assert otp_manager.validate("user1", "admin-access", b).valid
        assert otp_manager.validate("user1", "login", a).valid

    def test_admin_access_single_attempt(self, otp_manager):
        code = otp_manager.generate("admin", "admin-access")
        assert otp_manager.validate("admin", "admin-access", code.lower() + "x").remaining_attempts == 0
        assert otp_manager.validate("admin", "admin-access", code).message.startswith("Maximum attempts exceeded")

    def test_status_defaults_for_unknown_key(self, otp_manager):
        assert otp_manager.get_status("nobody", "login") == OTPStatus()

    def test_status_snapshot(self, otp_manager, clock):
        otp_manager.generate("user1", "password-reset")
        status = otp_manager.get_status("user1", "password-reset")
        assert status.exists
        assert (status.expires_at - clock.now).total_seconds() == 30 * 60
        assert status.attempts_remaining == 5

    def test_missing_parameters_raise(self, otp_manager):
        with pytest.raises(MissingParameterError):
            otp_manager.generate("", "login")
        with pytest.raises(MissingParameterError):
            otp_manager.resend("user1", "")
        with pytest.raises(MissingParameterError):
            otp_manager.validate("", "", "123456")
        assert otp_manager.size() == 0

    def test_invalid_config(self, otp_manager):
        with pytest.raises(ValueError):
            otp_manager.generate("user1", "login", OTPConfig(length=0))

    def test_revoke(self, otp_manager):
        code = otp_manager.generate("user1", "login")
        assert otp_manager.revoke("user1", "login")
        assert not otp_manager.revoke("user1", "login")
        assert not otp_manager.validate("user1", "login", code).valid

    def test_cleanup_and_active_records(self, otp_manager, clock):
        otp_manager.generate("user1", "transaction-t1")
        otp_manager.generate("user2", "password-reset")
        used = otp_manager.generate("user3", "login")
        otp_manager.validate("user3", "login", used)

        assert [r.subject for r in otp_manager.active_records()] == ["user1", "user2"]

        clock.advance(minutes=6)
        assert [r.subject for r in otp_manager.active_records()] == ["user2"]
        assert otp_manager.cleanup_expired() == 1
        assert otp_manager.size() == 2

    def test_concurrent_wrong_guesses_respect_attempt_budget(self, otp_manager):
        code = otp_manager.generate("user1", "login", OTPConfig(max_attempts=5))
        guess = wrong_code(code)
        results = []
        lock = threading.Lock()

        def submit():
            result = otp_manager.validate("user1", "login", guess)
            with lock:
                results.append(result)

        threads = [threading.Thread(target=submit) for _ in range(40)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        mismatches = [r for r in results if r.message.startswith("Invalid OTP")]
        assert len(mismatches) == 5
        assert sorted(r.remaining_attempts for r in mismatches) == [0, 1, 2, 3, 4]
        assert otp_manager.validate("user1", "login", code).message.startswith("Maximum attempts exceeded")
