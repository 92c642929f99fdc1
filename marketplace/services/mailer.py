# marketplace/services/mailer.py
import smtplib
from email.message import EmailMessage

from marketplace.domain.errors import MailDeliveryError
from marketplace.utils.settings import (
    MAIL_BACKEND,
    MAIL_FROM,
    SMTP_HOST,
    SMTP_PASSWORD,
    SMTP_PORT,
    SMTP_TIMEOUT,
    SMTP_USER,
)
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class SmtpMailer:
    """
    Transport email po SMTP (STARTTLS + login).
    Bez ponawiania - blad wysylki idzie do wywolujacego.
    """

    def __init__(
        self,
        host: str = SMTP_HOST,
        port: int = SMTP_PORT,
        user: str = SMTP_USER,
        password: str = SMTP_PASSWORD,
        sender: str = MAIL_FROM,
        timeout: int = SMTP_TIMEOUT,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender
        self.timeout = timeout

    def send(self, to: str, subject: str, body: str) -> None:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to
        msg.set_content(body)

        logger.info(f"SMTP {self.host}:{self.port} -> {to} ({subject})")
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.starttls()
                if self.user:
                    smtp.login(self.user, self.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise MailDeliveryError(f"Nie udalo sie wyslac maila do {to}") from e


class ConsoleMailer:
    """Dev: zamiast wysylac, loguje tresc maila."""

    def send(self, to: str, subject: str, body: str) -> None:
        logger.info(f"[MAIL] to={to} subject={subject!r} body={body!r}")


def build_mailer():
    if MAIL_BACKEND == "console":
        return ConsoleMailer()
    return SmtpMailer()
