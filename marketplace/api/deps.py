# marketplace/api/deps.py
from functools import lru_cache

from fastapi import Request

from marketplace.services.mailer import build_mailer
from marketplace.services.otp_service import InMemoryOtpStore, OtpGate, RedisOtpStore
from marketplace.services.password_reset_service import ResetTokenSigner
from marketplace.utils.settings import OTP_BACKEND


class LoginRequired(Exception):
    """Brak sesji na stronie - przekierowanie na logowanie."""

    def __init__(self, login_url: str):
        self.login_url = login_url


class AjaxUnauthorized(Exception):
    """Brak sesji przy wywolaniu AJAX - 401 z {success: false}."""


def session_user(request: Request) -> dict | None:
    return request.session.get("user")


def session_seller(request: Request) -> dict | None:
    return request.session.get("seller")


def require_user(request: Request) -> dict:
    user = session_user(request)
    if not user:
        raise LoginRequired("/login")
    return user


def require_ajax_user(request: Request) -> dict:
    user = session_user(request)
    if not user:
        raise AjaxUnauthorized()
    return user


def require_seller(request: Request) -> dict:
    seller = session_seller(request)
    if not seller:
        raise LoginRequired("/seller/login")
    return seller


#jeden magazyn kodow na proces
@lru_cache
def get_otp_gate() -> OtpGate:
    store = RedisOtpStore() if OTP_BACKEND == "redis" else InMemoryOtpStore()
    return OtpGate(store)


def get_mailer():
    return build_mailer()


def get_reset_tokens() -> ResetTokenSigner:
    return ResetTokenSigner()
