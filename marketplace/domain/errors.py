# marketplace/domain/errors.py
"""
Bledy domenowe. Dziedzicza po wbudowanych wyjatkach, ktore routery
juz tlumacza na kody HTTP (ValueError -> 400, PermissionError -> 403).
"""
from enum import Enum


class NotFoundError(ValueError):
    """Nieznany produkt, konto lub email."""


class ValidationMismatch(ValueError):
    """Niezgodne hasla, zly lub wygasly kod, niewazny token resetu."""


class EmptyCartError(ValueError):
    pass


class DuplicateEmailError(ValueError):
    pass


class OtpStatus(str, Enum):
    VERIFIED = "verified"
    EXPIRED = "expired"
    MISMATCH = "mismatch"


class OtpRejected(ValidationMismatch):
    def __init__(self, status: OtpStatus):
        self.status = status
        message = "Nieprawidłowy kod OTP" if status == OtpStatus.MISMATCH else "Kod OTP wygasł lub jest nieprawidłowy"
        super().__init__(message)


class MailDeliveryError(RuntimeError):
    pass


class CartChangedError(ValueError):
    """Koszyk zmienil sie w trakcie operacji i ponowienie nie pomoglo."""
