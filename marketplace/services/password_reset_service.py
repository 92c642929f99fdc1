# marketplace/services/password_reset_service.py
import hashlib
from enum import Enum

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy.orm import Session

from marketplace.domain.errors import (
    NotFoundError,
    OtpRejected,
    OtpStatus,
    ValidationMismatch,
)
from marketplace.repos.seller_repo import SellerRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.services.otp_service import OtpGate, OtpRecord
from marketplace.utils.security import hash_password
from marketplace.utils.settings import OTP_TTL_SECONDS, RESET_TOKEN_TTL_SECONDS, SECRET_KEY
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class AccountScope(str, Enum):
    USER = "user"
    SELLER = "seller"


class ResetTokenSigner:
    """
    Krotkotrwaly token wydawany po poprawnym OTP.
    Zawiera odcisk aktualnego hasha hasla, wiec po zmianie hasla token przestaje dzialac.
    """

    def __init__(self, secret: str = SECRET_KEY, max_age: int = RESET_TOKEN_TTL_SECONDS):
        self.serializer = URLSafeTimedSerializer(secret_key=secret, salt="password-reset")
        self.max_age = max_age

    @staticmethod
    def fingerprint(password_hash: str) -> str:
        #payload tokenu jest czytelny, wiec nie wkladamy do niego fragmentu hasha
        return hashlib.sha256(password_hash.encode()).hexdigest()[:16]

    def mint(self, scope: AccountScope, email: str, password_hash: str) -> str:
        return self.serializer.dumps(
            {"scope": scope.value, "email": email, "fp": self.fingerprint(password_hash)}
        )

    def check(self, token: str, scope: AccountScope, email: str, password_hash: str) -> None:
        try:
            data = self.serializer.loads(token, max_age=self.max_age)
        except SignatureExpired:
            raise ValidationMismatch("Link do zmiany hasła wygasł, poproś o nowy kod")
        except BadSignature:
            raise ValidationMismatch("Nieprawidłowy token zmiany hasła")

        if (
            data.get("scope") != scope.value
            or data.get("email") != email
            or data.get("fp") != self.fingerprint(password_hash)
        ):
            raise ValidationMismatch("Nieprawidłowy token zmiany hasła")


class PasswordResetService:
    """
    Use case resetu hasla:
    1. request_otp - kod na maila (tylko dla istniejacego konta)
    2. verify_otp - zuzywa kod, zwraca token resetu
    3. complete_reset - wymaga tokenu, zapisuje nowy hash
    """

    def __init__(self, db: Session, scope: AccountScope, gate: OtpGate, mailer, tokens: ResetTokenSigner):
        self.db = db
        self.scope = scope
        self.repo = UserRepo(db) if scope == AccountScope.USER else SellerRepo(db)
        self.gate = gate
        self.mailer = mailer
        self.tokens = tokens

    def _account(self, email: str):
        account = self.repo.get_by_email(email)
        if not account:
            raise NotFoundError("Nie znaleziono konta o podanym adresie email")
        return account

    def request_otp(self, email: str) -> OtpRecord:
        self._account(email)

        record = self.gate.issue(self.scope.value, email)
        minutes = OTP_TTL_SECONDS // 60
        self.mailer.send(
            to=email,
            subject="Kod do resetu hasła",
            body=f"Twój kod OTP to {record.code}. Kod jest ważny przez {minutes} minut.",
        )
        return record

    def verify_otp(self, email: str, code: str) -> str:
        status = self.gate.verify(self.scope.value, email, code)
        if status != OtpStatus.VERIFIED:
            raise OtpRejected(status)

        account = self._account(email)
        return self.tokens.mint(self.scope, email, account.password)

    def complete_reset(self, email: str, token: str, new_password: str, confirm_password: str) -> None:
        if new_password != confirm_password:
            raise ValidationMismatch("Hasła nie są zgodne")

        account = self._account(email)
        self.tokens.check(token, self.scope, email, account.password)

        try:
            self.repo.update_password(email, hash_password(new_password))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Zmieniono haslo dla {self.scope.value}:{email}")
