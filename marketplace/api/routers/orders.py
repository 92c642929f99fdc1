# marketplace/api/routers/orders.py
from typing import Annotated

from fastapi import APIRouter, Depends, Form
from sqlalchemy.orm import Session

from marketplace.api.deps import require_user
from marketplace.api.views import redirect, render, text
from marketplace.data.database import get_db
from marketplace.domain.errors import CartChangedError, EmptyCartError, NotFoundError
from marketplace.domain.schemas import (
    BuyForm,
    CartLineOut,
    CartPaymentForm,
    ProcessPaymentForm,
    ProductOut,
    StartPaymentForm,
)
from marketplace.services.order_service import OrderService

router = APIRouter(tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.get("/orders")
def list_orders(user: dict = Depends(require_user), db: Session = Depends(get_db)):
    return render("orders", login=True, orders=get_service(db).list_orders(user["id"]))


@router.post("/buy")
def buy(
    form: Annotated[BuyForm, Form()],
    user: dict = Depends(require_user),
    db: Session = Depends(get_db),
):
    """
    Zamowienie z platnoscia przy odbiorze, powrot na strone produktu.
    """
    try:
        get_service(db).place_order(user["id"], form.product_id, form.quantity, form.payment_method)
    except NotFoundError as e:
        return text(str(e), status_code=404)
    return redirect(f"/product/{form.product_id}")


@router.post("/start-payment")
def start_payment(
    form: Annotated[StartPaymentForm, Form()],
    user: dict = Depends(require_user),
    db: Session = Depends(get_db),
):
    try:
        product = get_service(db).payment_page(form.product_id)
    except NotFoundError as e:
        return text(str(e), status_code=404)
    return render(
        "payment_page",
        product=ProductOut.model_validate(product),
        quantity=form.quantity,
        total=str(product.price * form.quantity),
    )


@router.post("/process-payment")
def process_payment(
    form: Annotated[ProcessPaymentForm, Form()],
    user: dict = Depends(require_user),
    db: Session = Depends(get_db),
):
    """
    Zakup jednego produktu. Zamowienie zapisywane tylko po udanej platnosci.
    """
    try:
        product, order = get_service(db).buy_now(
            user_id=user["id"],
            email=user["email"],
            product_id=form.product_id,
            quantity=form.quantity,
            payment_status=form.payment_status,
        )
    except NotFoundError as e:
        return text(str(e), status_code=404)

    if order is None:
        return render("order_failed", product=ProductOut.model_validate(product), cart=False)
    return render(
        "order_success",
        product=ProductOut.model_validate(product),
        quantity=form.quantity,
        orders=[order],
        cart=False,
    )


@router.post("/checkout-payment")
def checkout_payment(user: dict = Depends(require_user), db: Session = Depends(get_db)):
    try:
        lines, total = get_service(db).cart_summary(user["id"])
    except EmptyCartError as e:
        return text(str(e))

    items = [
        CartLineOut(
            product_id=line.product_id,
            name=line.name,
            price=line.price,
            image_url=line.image_url,
            quantity=line.quantity,
            subtotal=line.price * line.quantity,
        )
        for line in lines
    ]
    return render("cart_payment_page", cart_items=items, total=str(total))


@router.post("/process-cart-payment")
def process_cart_payment(
    form: Annotated[CartPaymentForm, Form()],
    user: dict = Depends(require_user),
    db: Session = Depends(get_db),
):
    """
    Platnosc za caly koszyk. Porazka nie zmienia koszyka, mozna ponowic.
    """
    try:
        orders = get_service(db).checkout_cart(user["id"], user["email"], form.payment_status)
    except EmptyCartError as e:
        return text(str(e))
    except CartChangedError as e:
        return text(str(e), status_code=409)

    if orders is None:
        return render("order_failed", cart=True)
    return render("order_success", product=None, quantity=None, orders=orders, cart=True)
