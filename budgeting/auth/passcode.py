"""
Passcode Handling

The app is protected by a short numeric PIN. The PIN is created in two
steps (enter, then repeat) and afterwards checked on every login.

DESIGN DECISION: Only a bcrypt hash of the PIN is ever stored.
"""

from typing import Optional

import bcrypt


class PasscodeError(Exception):
    """Base exception for passcode operations."""
    pass


class InvalidPasscodeFormatError(PasscodeError):
    """Passcode is not the expected number of digits."""
    pass


class PasscodeMismatchError(PasscodeError):
    """Confirmation did not match the first entry."""

    def __init__(self, message: str = "Passcodes do not match."):
        super().__init__(message)


class IncorrectPasscodeError(PasscodeError):
    """Login attempt with the wrong passcode."""

    def __init__(self, message: str = "Incorrect passcode."):
        super().__init__(message)


class PasscodeAlreadySetError(PasscodeError):
    """Tried to create a passcode when one already exists."""
    pass


class PasscodeNotSetError(PasscodeError):
    """Tried to log in before a passcode was created."""
    pass


class InvalidPasscodeHashError(PasscodeError):
    """The stored hash is not a bcrypt hash."""
    pass


def validate_passcode_format(passcode: str, length: int = 4) -> str:
    """
    Check that passcode is exactly `length` ASCII digits.

    Returns the passcode unchanged.

    Raises:
        InvalidPasscodeFormatError: if it isn't
    """
    if (
        not isinstance(passcode, str)
        or len(passcode) != length
        or not passcode.isascii()
        or not passcode.isdigit()
    ):
        raise InvalidPasscodeFormatError(f"Passcode must be exactly {length} digits")
    return passcode


def hash_passcode(passcode: str) -> str:
    return bcrypt.hashpw(passcode.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_passcode(passcode: str, passcode_hash: str) -> bool:
    """
    Raises:
        InvalidPasscodeHashError: if passcode_hash can't be read by bcrypt
    """
    try:
        return bcrypt.checkpw(passcode.encode("utf-8"), passcode_hash.encode("utf-8"))
    except ValueError as e:
        raise InvalidPasscodeHashError(f"Stored passcode hash is unreadable: {e}") from e


class PasscodeSetup:
    """
    Two-step passcode creation.

    enter() remembers the first entry; confirm() compares the second entry
    against it. A mismatch starts over from the first step.
    """

    def __init__(self, length: int = 4):
        self._length = length
        self._pending: Optional[str] = None

    @property
    def is_confirming(self) -> bool:
        """True once a first entry is waiting for confirmation."""
        return self._pending is not None

    def enter(self, passcode: str) -> None:
        self._pending = validate_passcode_format(passcode, self._length)

    def confirm(self, passcode: str) -> str:
        """
        Confirm the pending passcode.

        Returns:
            The confirmed passcode

        Raises:
            PasscodeError: if nothing was entered yet
            PasscodeMismatchError: if the entries differ (state is reset)
        """
        if self._pending is None:
            raise PasscodeError("Enter a passcode before confirming it")

        pending, self._pending = self._pending, None
        if passcode != pending:
            raise PasscodeMismatchError()
        return pending
