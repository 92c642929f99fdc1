# marketplace/services/order_service.py
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.domain.errors import CartChangedError, EmptyCartError, NotFoundError
from marketplace.domain.schemas import OrderOut, PaymentStatus
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.order_repo import OrderRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.services.cart_service import lines_total
from marketplace.services.notification_service import NotificationService
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

PAYMENT_LABEL = "Fake Payment"
STATUS_PAID = "Paid"
STATUS_PLACED = "Placed"
CHECKOUT_ATTEMPTS = 3


class OrderService:
    """
    Serwis odpowiedzialny za domenę zamówień.
    Zamowienie jest niezmienne: cena kopiowana z produktu w chwili zakupu.
    """

    def __init__(self, db: Session, notifications: NotificationService | None = None):
        self.db = db
        self.repo = OrderRepo(db)
        self.carts = CartRepo(db)
        self.products = ProductRepo(db)
        self.notification_service = notifications or NotificationService()

    def _product(self, product_id: int):
        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundError("Produkt nie istnieje")
        return product

    def _save(self, orders: list[OrderModel]) -> list[OrderModel]:
        try:
            created = self.repo.add_orders(orders)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return created

    def cart_summary(self, user_id: int):
        """Strona platnosci za koszyk: pozycje i suma. Pusty koszyk to blad."""
        lines = self.carts.get_lines(user_id)
        if not lines:
            raise EmptyCartError("Twój koszyk jest pusty!")
        return lines, lines_total(lines)

    def checkout_cart(self, user_id: int, email: str, payment_status: PaymentStatus) -> list[OrderOut] | None:
        """
        Use Case: zamowienie z calego koszyka.

        1. Czyta (i blokuje) pozycje z aktualna cena produktu
        2. Platnosc nieudana -> nic nie zapisuje, koszyk zostaje (None)
        3. Udana -> usuwa dokladnie przeczytane pozycje i tworzy po jednym zamowieniu
           na kazda, w JEDNEJ transakcji
        4. Wysyla potwierdzenie (async)

        Gdy koszyk zmienil sie miedzy odczytem a usunieciem (rownolegle dodanie,
        drugie klikniecie "zaplac"), transakcja jest wycofywana i odczyt powtarzany.
        """
        for attempt in range(1, CHECKOUT_ATTEMPTS + 1):
            lines = self.carts.get_lines(user_id, for_update=True)
            if not lines:
                self.db.rollback()
                raise EmptyCartError("Twój koszyk jest pusty!")

            if payment_status != PaymentStatus.SUCCESS:
                self.db.rollback()
                logger.info(f"Platnosc za koszyk uzytkownika {user_id} nieudana, koszyk bez zmian")
                return None

            try:
                if self.carts.remove_lines(user_id, lines) != len(lines):
                    self.db.rollback()
                    logger.warning(f"Koszyk uzytkownika {user_id} zmienil sie w trakcie platnosci (proba {attempt})")
                    continue

                orders = self.repo.add_orders([
                    OrderModel(
                        user_id=user_id,
                        product_id=line.product_id,
                        quantity=line.quantity,
                        total_price=line.price * line.quantity,
                        payment_method=PAYMENT_LABEL,
                        status=STATUS_PAID,
                    )
                    for line in lines
                ])
                self.db.commit()
            except Exception:
                #ani zamowien bez wyczyszczonego koszyka, ani odwrotnie
                self.db.rollback()
                raise
            break
        else:
            raise CartChangedError("Koszyk zmienił się w trakcie płatności, spróbuj ponownie")

        order_ids = [o.id for o in orders]
        logger.info(f"Koszyk uzytkownika {user_id} zamieniony na zamowienia {order_ids}")
        self.notification_service.send_order_confirmation(email, order_ids)

        return [OrderOut.model_validate(o) for o in orders]

    def buy_now(self, user_id: int, email: str, product_id: int, quantity: int, payment_status: PaymentStatus):
        """
        Use Case: zakup jednego produktu z pominieciem koszyka.
        Zwraca (produkt, zamowienie albo None gdy platnosc nieudana).
        """
        product = self._product(product_id)

        if payment_status != PaymentStatus.SUCCESS:
            logger.info(f"Platnosc za produkt {product_id} nieudana (uzytkownik {user_id})")
            return product, None

        order = self._save([
            OrderModel(
                user_id=user_id,
                product_id=product.id,
                quantity=quantity,
                total_price=product.price * quantity,
                payment_method=PAYMENT_LABEL,
                status=STATUS_PAID,
            )
        ])[0]

        logger.info(f"Zamowienie {order.id} na produkt {product_id} x{quantity}")
        self.notification_service.send_order_confirmation(email, [order.id])

        return product, OrderOut.model_validate(order)

    def place_order(self, user_id: int, product_id: int, quantity: int, payment_method: str) -> OrderOut:
        """Zamowienie z platnoscia przy odbiorze - bez bramki platnosci."""
        product = self._product(product_id)

        order = self._save([
            OrderModel(
                user_id=user_id,
                product_id=product.id,
                quantity=quantity,
                total_price=product.price * quantity,
                payment_method=payment_method,
                status=STATUS_PLACED,
            )
        ])[0]

        logger.info(f"Zamowienie {order.id} ({payment_method}) na produkt {product_id}")
        return OrderOut.model_validate(order)

    def payment_page(self, product_id: int):
        return self._product(product_id)

    def list_orders(self, user_id: int) -> list[OrderOut]:
        result = []
        for order, product_name, image_url in self.repo.list_for_user(user_id):
            out = OrderOut.model_validate(order)
            out.product_name = product_name
            out.image_url = image_url
            result.append(out)
        return result
