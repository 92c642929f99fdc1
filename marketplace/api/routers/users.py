from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request
from sqlalchemy.orm import Session

from marketplace.api.deps import require_user
from marketplace.api.views import redirect, render
from marketplace.data.database import get_db
from marketplace.domain.errors import DuplicateEmailError, NotFoundError
from marketplace.domain.schemas import AccountForm, LoginForm, SignupForm
from marketplace.services.user_service import UserService

router = APIRouter(tags=["users"])


@router.get("/user/signup")
def signup_page():
    return render("signup", error=None)


@router.post("/user/signup")
def signup(form: Annotated[SignupForm, Form()], db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        service.create_user(form)
    except DuplicateEmailError as e:
        return render("signup", status_code=400, error=str(e))
    return redirect("/login")


@router.get("/login")
def login_page():
    return render("login", error=None)


@router.post("/login")
def login(request: Request, form: Annotated[LoginForm, Form()], db: Session = Depends(get_db)):
    user = UserService(db).authenticate(form.email, form.password)
    if not user:
        return render("login", status_code=401, error="Nieprawidłowy email lub hasło.")

    #tylko tozsamosc kupujacego, sesja sprzedawcy zostaje nietknieta
    request.session["user"] = {"id": user.id, "name": user.name, "email": user.email}
    return redirect("/home")


@router.get("/logout")
def logout(request: Request):
    request.session.pop("user", None)
    return redirect("/home")


@router.get("/account")
def account_page(user: dict = Depends(require_user), db: Session = Depends(get_db)):
    try:
        account = UserService(db).get_user(user["id"])
    except NotFoundError:
        return redirect("/login")
    return render("account", login=True, user=account)


@router.post("/account")
def update_account(
    request: Request,
    form: Annotated[AccountForm, Form()],
    user: dict = Depends(require_user),
    db: Session = Depends(get_db),
):
    service = UserService(db)
    try:
        updated = service.update_account(user["id"], form)
    except DuplicateEmailError as e:
        return render("account", status_code=400, login=True, user=service.get_user(user["id"]), error=str(e))
    except NotFoundError:
        return redirect("/login")

    request.session["user"] = {"id": updated.id, "name": updated.name, "email": updated.email}
    return redirect("/account")
