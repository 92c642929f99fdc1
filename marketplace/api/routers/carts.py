#marketplace/api/routers/carts.py
from typing import Annotated

from fastapi import APIRouter, Depends, Form
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.api.deps import require_ajax_user, require_user
from marketplace.api.views import redirect, render
from marketplace.data.database import get_db
from marketplace.domain.errors import CartChangedError, NotFoundError
from marketplace.domain.schemas import (
    CartAddOut,
    CartDeleteOut,
    CartItemIn,
    CartOut,
    CartUpdateIn,
    CartUpdateOut,
)
from marketplace.services.cart_service import CartService
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/cart", tags=["cart"])


def _failure(status_code: int, message: str | None = None) -> JSONResponse:
    content = {"success": False}
    if message:
        content["message"] = message
    return JSONResponse(status_code=status_code, content=content)


@router.get("")
def cart_page(user: dict = Depends(require_user), db: Session = Depends(get_db)):
    cart = CartOut.model_validate(CartService(db).get_cart(user["id"]))
    return render("cart", login=True, cart=cart)


# =====================================================
# AJAX - JSON, brak sesji to 401
# =====================================================
@router.post("/add", response_model=CartAddOut)
def add_to_cart(
    payload: CartItemIn,
    user: dict = Depends(require_ajax_user),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        svc.add_product(user["id"], payload.product_id)
    except NotFoundError as e:
        return _failure(404, str(e))
    except SQLAlchemyError:
        logger.exception(f"Dodanie produktu {payload.product_id} do koszyka nieudane")
        return _failure(500, "Błąd dodawania produktu")
    return {"success": True, "message": "Produkt dodany do koszyka"}


@router.post("/update-ajax", response_model=CartUpdateOut, response_model_exclude_none=True)
def update_ajax(
    payload: CartUpdateIn,
    user: dict = Depends(require_ajax_user),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        return svc.change_quantity(user["id"], payload.product_id, payload.action)
    except NotFoundError as e:
        return _failure(404, str(e))
    except CartChangedError as e:
        return _failure(409, str(e))
    except SQLAlchemyError:
        logger.exception(f"Zmiana ilosci produktu {payload.product_id} nieudana")
        return _failure(500)


@router.post("/delete-ajax", response_model=CartDeleteOut)
def delete_ajax(
    payload: CartItemIn,
    user: dict = Depends(require_ajax_user),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    try:
        total = svc.remove_product(user["id"], payload.product_id)
    except SQLAlchemyError:
        logger.exception(f"Usuniecie produktu {payload.product_id} z koszyka nieudane")
        return _failure(500)
    return {"success": True, "total": total}


# =====================================================
# FORMULARZE - przekierowanie z powrotem na /cart
# =====================================================
@router.post("/update")
def update_form(
    form: Annotated[CartUpdateIn, Form()],
    user: dict = Depends(require_user),
    db: Session = Depends(get_db),
):
    try:
        CartService(db).change_quantity(user["id"], form.product_id, form.action)
    except (NotFoundError, CartChangedError):
        #widok koszyka i tak pokaze aktualny stan
        pass
    return redirect("/cart")


@router.post("/delete")
def delete_form(
    form: Annotated[CartItemIn, Form()],
    user: dict = Depends(require_user),
    db: Session = Depends(get_db),
):
    CartService(db).remove_product(user["id"], form.product_id)
    return redirect("/cart")
