# marketplace/api/routers/password_reset.py
"""
Reset hasla kodem OTP, osobno dla kupujacych i sprzedawcow:

forgot-password (email) -> kod na maila
verify-otp (email, otp) -> reset_token
reset-password (email, reset_token, new_password, confirm_password)
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Form
from sqlalchemy.orm import Session

from marketplace.api.deps import get_mailer, get_otp_gate, get_reset_tokens
from marketplace.api.views import render, text
from marketplace.data.database import get_db
from marketplace.domain.errors import MailDeliveryError, NotFoundError, ValidationMismatch
from marketplace.domain.schemas import ForgotPasswordForm, ResetPasswordForm, VerifyOtpForm
from marketplace.services.otp_service import OtpGate
from marketplace.services.password_reset_service import (
    AccountScope,
    PasswordResetService,
    ResetTokenSigner,
)
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["password-reset"])

_VIEWS = {
    AccountScope.USER: {
        "forgot": "forgot_password",
        "otp": "verify_otp",
        "reset": "reset_password",
        "login": "/login",
    },
    AccountScope.SELLER: {
        "forgot": "seller_forgot_password",
        "otp": "seller_enter_otp",
        "reset": "seller_reset_password",
        "login": "/seller/login",
    },
}


def _user_service(
    db: Session = Depends(get_db),
    gate: OtpGate = Depends(get_otp_gate),
    mailer=Depends(get_mailer),
    tokens: ResetTokenSigner = Depends(get_reset_tokens),
) -> PasswordResetService:
    return PasswordResetService(db, AccountScope.USER, gate, mailer, tokens)


def _seller_service(
    db: Session = Depends(get_db),
    gate: OtpGate = Depends(get_otp_gate),
    mailer=Depends(get_mailer),
    tokens: ResetTokenSigner = Depends(get_reset_tokens),
) -> PasswordResetService:
    return PasswordResetService(db, AccountScope.SELLER, gate, mailer, tokens)


def _request_otp(scope: AccountScope, form: ForgotPasswordForm, svc: PasswordResetService):
    views = _VIEWS[scope]
    try:
        svc.request_otp(form.email)
    except NotFoundError:
        return render(views["forgot"], status_code=404, error="Nie znaleziono konta o podanym adresie email.")
    except MailDeliveryError:
        logger.exception(f"Wysylka OTP do {form.email} nieudana")
        return text("Nie udało się wysłać kodu, spróbuj ponownie później", status_code=500)
    return render(views["otp"], email=form.email)


def _verify_otp(scope: AccountScope, form: VerifyOtpForm, svc: PasswordResetService):
    try:
        token = svc.verify_otp(form.email, form.otp)
    except NotFoundError as e:
        return text(str(e), status_code=404)
    except ValidationMismatch as e:
        return text(str(e), status_code=400)
    return render(_VIEWS[scope]["reset"], email=form.email, reset_token=token)


def _reset_password(scope: AccountScope, form: ResetPasswordForm, svc: PasswordResetService):
    try:
        svc.complete_reset(form.email, form.reset_token, form.new_password, form.confirm_password)
    except NotFoundError as e:
        return text(str(e), status_code=404)
    except ValidationMismatch as e:
        return text(str(e), status_code=400)
    return text(f"Hasło zostało zmienione. Możesz się teraz zalogować: {_VIEWS[scope]['login']}")


# =====================================================
# KUPUJACY
# =====================================================
@router.get("/forgot-password")
def forgot_password_page():
    return render("forgot_password", error=None)


@router.post("/forgot-password")
def forgot_password(form: Annotated[ForgotPasswordForm, Form()], svc=Depends(_user_service)):
    return _request_otp(AccountScope.USER, form, svc)


@router.post("/verify-otp")
def verify_otp(form: Annotated[VerifyOtpForm, Form()], svc=Depends(_user_service)):
    return _verify_otp(AccountScope.USER, form, svc)


@router.post("/reset-password")
def reset_password(form: Annotated[ResetPasswordForm, Form()], svc=Depends(_user_service)):
    return _reset_password(AccountScope.USER, form, svc)


# =====================================================
# SPRZEDAWCY
# =====================================================
@router.get("/seller/forgot-password")
def seller_forgot_password_page():
    return render("seller_forgot_password", error=None)


@router.post("/seller/forgot-password")
def seller_forgot_password(form: Annotated[ForgotPasswordForm, Form()], svc=Depends(_seller_service)):
    return _request_otp(AccountScope.SELLER, form, svc)


@router.post("/seller/verify-otp")
def seller_verify_otp(form: Annotated[VerifyOtpForm, Form()], svc=Depends(_seller_service)):
    return _verify_otp(AccountScope.SELLER, form, svc)


@router.post("/seller/reset-password")
def seller_reset_password(form: Annotated[ResetPasswordForm, Form()], svc=Depends(_seller_service)):
    return _reset_password(AccountScope.SELLER, form, svc)
