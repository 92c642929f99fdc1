from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from marketplace.data.database import SessionLocal
from marketplace.data.models import CartItemModel, OrderModel, UserModel
from marketplace.domain.errors import CartChangedError, EmptyCartError
from marketplace.domain.schemas import PaymentStatus
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.order_repo import OrderRepo
from marketplace.services.cart_service import CartService
from marketplace.services.order_service import OrderService


class FakeNotifications:
    def __init__(self):
        self.calls = []

    def send_order_confirmation(self, email, order_ids):
        self.calls.append((email, order_ids))


def count(db, model):
    return db.scalar(select(func.count()).select_from(model))


def orders(db):
    db.expire_all()
    return list(db.scalars(select(OrderModel).order_by(OrderModel.product_id)))


@pytest.fixture
def stocked_cart(buyer, make_product):
    a = make_product(name="A", price="10.00")
    b = make_product(name="B", price="5.00")
    buyer.post("/cart/add", json={"product_id": a.id})
    buyer.post("/cart/add", json={"product_id": a.id})
    buyer.post("/cart/add", json={"product_id": b.id})
    return a, b


def test_successful_checkout_creates_one_order_per_line_and_clears_cart(buyer, db, stocked_cart):
    a, b = stocked_cart

    resp = buyer.post("/process-cart-payment", data={"payment_status": "success"})

    assert resp.status_code == 200
    assert resp.json()["view"] == "order_success"
    placed = orders(db)
    assert [(o.product_id, o.quantity, o.total_price, o.status) for o in placed] == [
        (a.id, 2, Decimal("20.00"), "Paid"),
        (b.id, 1, Decimal("5.00"), "Paid"),
    ]
    assert all(o.payment_method == "Fake Payment" for o in placed)
    assert count(db, CartItemModel) == 0


def test_failed_payment_keeps_cart_and_creates_nothing(buyer, db, stocked_cart):
    resp = buyer.post("/process-cart-payment", data={"payment_status": "failed"})

    assert resp.json()["view"] == "order_failed"
    assert count(db, OrderModel) == 0
    assert count(db, CartItemModel) == 2


def test_checkout_of_empty_cart_reports_it(buyer, db):
    resp = buyer.post("/process-cart-payment", data={"payment_status": "success"})

    assert resp.status_code == 200
    assert "pusty" in resp.text
    assert count(db, OrderModel) == 0


def test_unknown_payment_status_is_rejected(buyer, stocked_cart):
    resp = buyer.post("/process-cart-payment", data={"payment_status": "maybe"})
    assert resp.status_code == 422


def test_checkout_requires_login(client):
    resp = client.post("/process-cart-payment", data={"payment_status": "success"}, follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/login"


def test_order_price_is_captured_at_purchase(buyer, db, stocked_cart):
    a, _ = stocked_cart
    buyer.post("/process-cart-payment", data={"payment_status": "success"})

    a.price = Decimal("99.00")
    db.commit()

    order = next(o for o in orders(db) if o.product_id == a.id)
    assert order.total_price == Decimal("20.00")


def test_checkout_payment_page_lists_lines_and_total(buyer, stocked_cart):
    body = buyer.post("/checkout-payment").json()

    assert body["view"] == "cart_payment_page"
    assert len(body["cart_items"]) == 2
    assert Decimal(body["total"]) == Decimal("25")


def test_checkout_rolls_back_when_saving_orders_fails(db, make_product, monkeypatch):
    user = UserModel(name="U", email="u@example.com", password="x")
    db.add(user)
    db.commit()
    product = make_product(price="7.00")
    db.add(CartItemModel(user_id=user.id, product_id=product.id, quantity=3))
    db.commit()

    def broken_add_orders(self, orders):
        raise OperationalError("INSERT INTO orders", {}, Exception("disk I/O error"))

    monkeypatch.setattr(OrderRepo, "add_orders", broken_add_orders)
    notifications = FakeNotifications()

    with pytest.raises(OperationalError):
        OrderService(db, notifications).checkout_cart(user.id, user.email, PaymentStatus.SUCCESS)

    #pozycje usuniete przed bledem wracaja razem z rollbackiem
    assert count(db, OrderModel) == 0
    assert count(db, CartItemModel) == 1
    assert notifications.calls == []


def test_checkout_service_notifies_with_order_ids(db, make_product):
    user = UserModel(name="U", email="u@example.com", password="x")
    db.add(user)
    db.commit()
    product = make_product(price="2.50")
    db.add(CartItemModel(user_id=user.id, product_id=product.id, quantity=2))
    db.commit()
    notifications = FakeNotifications()

    created = OrderService(db, notifications).checkout_cart(user.id, user.email, PaymentStatus.SUCCESS)

    assert len(created) == 1
    assert created[0].total_price == Decimal("5.00")
    assert notifications.calls == [("u@example.com", [created[0].id])]


def test_checkout_service_rejects_empty_cart(db):
    user = UserModel(name="U", email="u@example.com", password="x")
    db.add(user)
    db.commit()

    with pytest.raises(EmptyCartError):
        OrderService(db, FakeNotifications()).checkout_cart(user.id, user.email, PaymentStatus.SUCCESS)


# =====================================================
# zakup pojedynczego produktu
# =====================================================
def test_process_payment_success_creates_single_order(buyer, db, make_product):
    product = make_product(price="4.00")

    resp = buyer.post(
        "/process-payment",
        data={"product_id": product.id, "quantity": 3, "payment_status": "success"},
    )

    assert resp.json()["view"] == "order_success"
    [order] = orders(db)
    assert order.quantity == 3
    assert order.total_price == Decimal("12.00")
    assert order.status == "Paid"


def test_process_payment_failure_creates_nothing(buyer, db, make_product):
    product = make_product()

    resp = buyer.post(
        "/process-payment",
        data={"product_id": product.id, "quantity": 1, "payment_status": "failed"},
    )

    assert resp.json()["view"] == "order_failed"
    assert count(db, OrderModel) == 0


def test_process_payment_unknown_product(buyer):
    resp = buyer.post("/process-payment", data={"product_id": 42, "quantity": 1, "payment_status": "success"})
    assert resp.status_code == 404


def test_process_payment_rejects_non_positive_quantity(buyer, make_product):
    product = make_product()
    resp = buyer.post("/process-payment", data={"product_id": product.id, "quantity": 0, "payment_status": "success"})
    assert resp.status_code == 422


def test_start_payment_renders_payment_page(buyer, make_product):
    product = make_product(price="3.00")
    body = buyer.post("/start-payment", data={"product_id": product.id, "quantity": 2}).json()

    assert body["view"] == "payment_page"
    assert body["product"]["id"] == product.id
    assert Decimal(body["total"]) == Decimal("6")


def test_buy_cash_on_delivery_redirects_to_product(buyer, db, make_product):
    product = make_product(price="8.00")

    resp = buyer.post("/buy", data={"product_id": product.id, "quantity": 2}, follow_redirects=False)

    assert resp.status_code == 303
    assert resp.headers["location"] == f"/product/{product.id}"
    [order] = orders(db)
    assert order.payment_method == "COD"
    assert order.status == "Placed"
    assert order.total_price == Decimal("16.00")


def test_orders_page_lists_newest_first_with_product_name(buyer, make_product):
    first = make_product(name="First")
    second = make_product(name="Second")
    buyer.post("/buy", data={"product_id": first.id})
    buyer.post("/buy", data={"product_id": second.id})

    body = buyer.get("/orders").json()

    assert body["view"] == "orders"
    assert [o["product_name"] for o in body["orders"]] == ["Second", "First"]


# =====================================================
# checkout przeplatany z innym zadaniem tego samego uzytkownika
# =====================================================
@pytest.fixture
def after_cart_read(monkeypatch):
    """Zaraz po pierwszym odczycie koszyka do zaplaty wykonuje akcje w osobnej sesji."""
    original = CartRepo.get_lines
    pending = []

    def get_lines(self, user_id, for_update=False):
        lines = original(self, user_id, for_update=for_update)
        if for_update and pending:
            action = pending.pop()
            other = SessionLocal()
            try:
                action(other)
            finally:
                other.close()
        return lines

    monkeypatch.setattr(CartRepo, "get_lines", get_lines)
    return pending.append


@pytest.fixture
def cart_owner(db):
    user = UserModel(name="U", email="u@example.com", password="x")
    db.add(user)
    db.commit()
    return user


def cart_contents(db):
    db.expire_all()
    return [(i.product_id, i.quantity) for i in db.scalars(select(CartItemModel).order_by(CartItemModel.product_id))]


def test_line_added_during_checkout_stays_in_cart(db, cart_owner, make_product, after_cart_read):
    a = make_product(name="A")
    b = make_product(name="B", price="5.00")
    db.add(CartItemModel(user_id=cart_owner.id, product_id=a.id, quantity=1))
    db.commit()
    after_cart_read(lambda other: CartService(other).add_product(cart_owner.id, b.id))

    created = OrderService(db, FakeNotifications()).checkout_cart(cart_owner.id, cart_owner.email, PaymentStatus.SUCCESS)

    assert [o.product_id for o in created] == [a.id]
    assert cart_contents(db) == [(b.id, 1)]


def test_quantity_raised_during_checkout_is_ordered_in_full(db, cart_owner, make_product, after_cart_read):
    a = make_product(name="A", price="3.00")
    db.add(CartItemModel(user_id=cart_owner.id, product_id=a.id, quantity=1))
    db.commit()
    after_cart_read(lambda other: CartService(other).change_quantity(cart_owner.id, a.id, "increase"))

    created = OrderService(db, FakeNotifications()).checkout_cart(cart_owner.id, cart_owner.email, PaymentStatus.SUCCESS)

    assert [(o.product_id, o.quantity, o.total_price) for o in created] == [(a.id, 2, Decimal("6.00"))]
    assert cart_contents(db) == []


def test_double_submitted_checkout_orders_once(db, cart_owner, make_product, after_cart_read):
    a = make_product(name="A")
    db.add(CartItemModel(user_id=cart_owner.id, product_id=a.id, quantity=2))
    db.commit()
    after_cart_read(
        lambda other: OrderService(other, FakeNotifications()).checkout_cart(
            cart_owner.id, cart_owner.email, PaymentStatus.SUCCESS
        )
    )
    notifications = FakeNotifications()

    with pytest.raises(EmptyCartError):
        OrderService(db, notifications).checkout_cart(cart_owner.id, cart_owner.email, PaymentStatus.SUCCESS)

    assert [(o.product_id, o.quantity) for o in orders(db)] == [(a.id, 2)]
    assert cart_contents(db) == []
    assert notifications.calls == []


def test_checkout_gives_up_when_cart_keeps_changing(db, cart_owner, make_product, monkeypatch):
    a = make_product(name="A")
    db.add(CartItemModel(user_id=cart_owner.id, product_id=a.id, quantity=1))
    db.commit()
    monkeypatch.setattr(CartRepo, "remove_lines", lambda self, user_id, lines: 0)

    with pytest.raises(CartChangedError):
        OrderService(db, FakeNotifications()).checkout_cart(cart_owner.id, cart_owner.email, PaymentStatus.SUCCESS)

    assert count(db, OrderModel) == 0
    assert cart_contents(db) == [(a.id, 1)]
