"""Passcode authentication package."""

from budgeting.auth.passcode import (
    IncorrectPasscodeError,
    InvalidPasscodeFormatError,
    InvalidPasscodeHashError,
    PasscodeAlreadySetError,
    PasscodeError,
    PasscodeMismatchError,
    PasscodeNotSetError,
    PasscodeSetup,
    check_passcode,
    hash_passcode,
    validate_passcode_format,
)

__all__ = [
    "IncorrectPasscodeError",
    "InvalidPasscodeFormatError",
    "InvalidPasscodeHashError",
    "PasscodeAlreadySetError",
    "PasscodeError",
    "PasscodeMismatchError",
    "PasscodeNotSetError",
    "PasscodeSetup",
    "check_passcode",
    "hash_passcode",
    "validate_passcode_format",
]
