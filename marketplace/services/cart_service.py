from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.orm import Session

from marketplace.domain.errors import CartChangedError, NotFoundError
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

DECREASE_ATTEMPTS = 3


def lines_total(lines) -> Decimal:
    return sum((line.price * line.quantity for line in lines), Decimal("0.00"))


class CartService:
    """
    Koszyk kupujacego: wiersze (user, product, quantity).
    commands (add, change, remove) modyfikuja stan i commituja,
    query (get, total) tylko odczyt
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    #query - odczyt
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        lines = self.repo.get_lines(user_id)

        return {
            "items": [
                {
                    "product_id": line.product_id,
                    "name": line.name,
                    "price": line.price,
                    "image_url": line.image_url,
                    "quantity": line.quantity,
                    "subtotal": line.price * line.quantity,
                }
                for line in lines
            ],
            "total": lines_total(lines),
        }

    def cart_total(self, user_id: int) -> Decimal:
        #cena zawsze aktualna z produktu, nie zamrozona w koszyku
        return lines_total(self.repo.get_lines(user_id))

    #commands
    def add_product(self, user_id: int, product_id: int) -> int:
        if not self.products.get_product(product_id):
            raise NotFoundError("Produkt nie istnieje")

        self.repo.upsert_increment(user_id, product_id)
        self.repo.commit()

        item = self.repo.get_cart_item(user_id, product_id)
        logger.info(f"Produkt {product_id} w koszyku uzytkownika {user_id}, ilosc {item.quantity}")
        return item.quantity

    def change_quantity(self, user_id: int, product_id: int, action: str) -> Dict[str, Any]:
        """
        increase: +1
        decrease: -1, a przy ilosci 1 usuwa wiersz (removed) zamiast zapisac 0
        """
        if action == "increase":
            changed = self.repo.increment(user_id, product_id)
        elif action == "decrease":
            for _ in range(DECREASE_ATTEMPTS):
                changed = self.repo.decrement(user_id, product_id)
                if changed:
                    break
                #nie dalo sie zmniejszyc, wiec to byla ostatnia sztuka
                if self.repo.delete_last_unit(user_id, product_id):
                    self.repo.commit()
                    logger.info(f"Produkt {product_id} usuniety z koszyka uzytkownika {user_id}")
                    return {"success": True, "removed": True, "total": self.cart_total(user_id)}
                #zadne nie trafilo: wiersza nie ma albo ktos zwiekszyl ilosc pomiedzy
                if self.repo.get_cart_item(user_id, product_id) is None:
                    break
            else:
                self.repo.rollback()
                raise CartChangedError("Ilość w koszyku zmieniła się, odśwież koszyk")
        else:
            raise ValueError(f"Nieznana akcja: {action}")

        if not changed:
            self.repo.rollback()
            raise NotFoundError("Produktu nie ma w koszyku")

        self.repo.commit()

        item = self.repo.get_cart_item(user_id, product_id)
        product = self.products.get_product(product_id)
        return {
            "success": True,
            "removed": False,
            "newQuantity": item.quantity,
            "newSubtotal": product.price * item.quantity,
            "total": self.cart_total(user_id),
        }

    def remove_product(self, user_id: int, product_id: int) -> Decimal:
        deleted = self.repo.delete_cart_item(user_id, product_id)
        self.repo.commit()

        if deleted:
            logger.info(f"Produkt {product_id} usuniety z koszyka uzytkownika {user_id}")
        return self.cart_total(user_id)
