"""Email and password validation rules."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

# Minimum strength enforced at registration and password change.
STRONG_PASSWORD_PATTERN = re.compile(
    r"^(?=.*[0-9])(?=.*[a-z])(?=.*[A-Z])(?=.*[@#$%^&+=!])(?=\S+$).{8,}$"
)
STRONG_PASSWORD_MESSAGE = (
    "Password must be at least 8 characters and contain an upper-case letter, "
    "a lower-case letter, a digit and one of @#$%^&+=!"
)

_UPPERCASE = re.compile(r"[A-Z]")
_LOWERCASE = re.compile(r"[a-z]")
_DIGIT = re.compile(r"[0-9]")
_SPECIAL = re.compile(r"[!@#$%^&*()\-_+=\[\]{}|\\:;\"'<>,.?/]")
_COMMON_SEQUENCES = ("123", "abc", "qwerty", "password", "admin", "letmein")

COMMON_PASSWORDS = frozenset(
    {"Password123!", "Admin@123", "Welcome123!", "Qwerty123!", "Password@2024"}
)


def is_valid_email(value: str | None) -> bool:
    return bool(value) and EMAIL_PATTERN.match(value) is not None


def is_strong_password(value: str | None) -> bool:
    return bool(value) and STRONG_PASSWORD_PATTERN.match(value) is not None


class PasswordStrength(str, Enum):
    WEAK = "WEAK"
    MEDIUM = "MEDIUM"
    STRONG = "STRONG"


@dataclass(frozen=True)
class PasswordValidationResult:
    errors: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


class PasswordValidator:
    """Configurable password policy (length bounds and character classes)."""

    def __init__(
        self,
        min_length: int = 8,
        max_length: int = 128,
        *,
        require_special_char: bool = True,
        require_number: bool = True,
        require_uppercase: bool = True,
    ) -> None:
        if min_length < 1 or max_length < min_length:
            raise ValueError("Invalid length configuration")
        self.min_length = min_length
        self.max_length = max_length
        self.require_special_char = require_special_char
        self.require_number = require_number
        self.require_uppercase = require_uppercase

    @classmethod
    def from_config(cls, config) -> "PasswordValidator":
        """Build a validator from a :class:`~advisory.models.SystemConfig` row."""

        return cls(
            min_length=config.password_min_length,
            require_special_char=config.password_require_special_char,
            require_number=config.password_require_number,
            require_uppercase=config.password_require_uppercase,
        )

    def validate(self, password: str | None) -> PasswordValidationResult:
        if not password or not password.strip():
            return PasswordValidationResult(["Password cannot be null or empty"])

        candidate = password.strip()
        errors: list[str] = []
        if len(candidate) < self.min_length:
            errors.append(f"Password must be at least {self.min_length} characters long")
        if len(candidate) > self.max_length:
            errors.append(f"Password must not exceed {self.max_length} characters")
        if self.require_uppercase and not _UPPERCASE.search(candidate):
            errors.append("Password must contain at least one uppercase letter")
        if not _LOWERCASE.search(candidate):
            errors.append("Password must contain at least one lowercase letter")
        if self.require_number and not _DIGIT.search(candidate):
            errors.append("Password must contain at least one digit")
        if self.require_special_char and not _SPECIAL.search(candidate):
            errors.append("Password must contain at least one special character")
        if candidate in COMMON_PASSWORDS:
            errors.append("Password is too common and easily guessable")
        return PasswordValidationResult(errors)

    def is_valid(self, password: str | None) -> bool:
        return self.validate(password).valid

    def strength(self, password: str | None) -> PasswordStrength | None:
        """Score a valid password; invalid passwords have no strength."""

        if not self.is_valid(password):
            return None
        candidate = password.strip()
        score = 0
        if len(candidate) >= 12:
            score += 2
        elif len(candidate) >= 10:
            score += 1
        score += sum(
            1 for pattern in (_UPPERCASE, _LOWERCASE, _DIGIT, _SPECIAL) if pattern.search(candidate)
        )
        if len(_SPECIAL.findall(candidate)) > 1:
            score += 1
        if len(_DIGIT.findall(candidate)) > 2:
            score += 1
        lowered = candidate.lower()
        if not any(sequence in lowered for sequence in _COMMON_SEQUENCES):
            score += 1

        if score >= 8:
            return PasswordStrength.STRONG
        if score >= 5:
            return PasswordStrength.MEDIUM
        return PasswordStrength.WEAK


__all__ = [
    "COMMON_PASSWORDS",
    "EMAIL_PATTERN",
    "PasswordStrength",
    "PasswordValidationResult",
    "PasswordValidator",
    "STRONG_PASSWORD_MESSAGE",
    "is_strong_password",
    "is_valid_email",
]
