from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request
from sqlalchemy.orm import Session

from marketplace.api.deps import require_seller
from marketplace.api.views import redirect, render, text
from marketplace.data.database import get_db
from marketplace.domain.errors import DuplicateEmailError, NotFoundError
from marketplace.domain.schemas import (
    LoginForm,
    ProductEditForm,
    ProductForm,
    SellerProfileForm,
    SellerSignupForm,
)
from marketplace.services.seller_service import SellerService

router = APIRouter(prefix="/seller", tags=["sellers"])


def _session_payload(seller) -> dict:
    return {"id": seller.id, "email": seller.email, "store_name": seller.store_name}


# =====================================================
# KONTO
# =====================================================
@router.get("/signup")
def signup_page():
    return render("seller_signup", error=None)


@router.post("/signup")
def signup(form: Annotated[SellerSignupForm, Form()], db: Session = Depends(get_db)):
    try:
        SellerService(db).create_seller(form)
    except DuplicateEmailError as e:
        return render("seller_signup", status_code=400, error=str(e))
    return redirect("/seller/login")


@router.get("/login")
def login_page():
    return render("seller_login", error=None)


@router.post("/login")
def login(request: Request, form: Annotated[LoginForm, Form()], db: Session = Depends(get_db)):
    seller = SellerService(db).authenticate(form.email, form.password)
    if not seller:
        return render("seller_login", status_code=401, error="Nieprawidłowy email lub hasło.")

    request.session["seller"] = _session_payload(seller)
    return redirect("/seller/dashboard")


@router.get("/logout")
def logout(request: Request):
    request.session.pop("seller", None)
    return redirect("/seller/login")


@router.get("/dashboard")
def dashboard(seller: dict = Depends(require_seller), db: Session = Depends(get_db)):
    return render("seller-dashboard", seller=seller, sales_data=SellerService(db).dashboard(seller["id"]))


@router.get("/edit-profile")
def edit_profile_page(seller: dict = Depends(require_seller), db: Session = Depends(get_db)):
    try:
        profile = SellerService(db).get_seller(seller["id"])
    except NotFoundError:
        return redirect("/seller/login")
    return render("edit-profile", seller=profile)


@router.post("/edit-profile")
def edit_profile(
    request: Request,
    form: Annotated[SellerProfileForm, Form()],
    seller: dict = Depends(require_seller),
    db: Session = Depends(get_db),
):
    try:
        updated = SellerService(db).update_profile(seller["id"], form)
    except NotFoundError:
        return redirect("/seller/login")

    request.session["seller"] = _session_payload(updated)
    return redirect("/seller/dashboard")


# =====================================================
# PRODUKTY
# =====================================================
@router.get("/products")
def products(seller: dict = Depends(require_seller), db: Session = Depends(get_db)):
    return render("products", products=SellerService(db).list_products(seller["id"]))


@router.get("/list-product")
def list_product_page(seller: dict = Depends(require_seller)):
    return render("list-product")


@router.post("/add-product")
def add_product(
    form: Annotated[ProductForm, Form()],
    seller: dict = Depends(require_seller),
    db: Session = Depends(get_db),
):
    SellerService(db).add_product(seller["id"], form)
    return redirect("/seller/dashboard")


@router.get("/edit-product/{product_id}")
def edit_product_page(product_id: int, seller: dict = Depends(require_seller), db: Session = Depends(get_db)):
    try:
        product = SellerService(db).get_product(seller["id"], product_id)
    except NotFoundError:
        return text("Product not found", status_code=404)
    return render("edit_product", product=product)


@router.post("/edit-product/{product_id}")
def edit_product(
    product_id: int,
    form: Annotated[ProductEditForm, Form()],
    seller: dict = Depends(require_seller),
    db: Session = Depends(get_db),
):
    try:
        SellerService(db).edit_product(seller["id"], product_id, form)
    except NotFoundError:
        return text("Product not found", status_code=404)
    return redirect("/seller/dashboard")


@router.post("/delete-product/{product_id}")
def delete_product(product_id: int, seller: dict = Depends(require_seller), db: Session = Depends(get_db)):
    try:
        SellerService(db).delete_product(seller["id"], product_id)
    except NotFoundError:
        return text("Product not found", status_code=404)
    return redirect("/seller/dashboard")
