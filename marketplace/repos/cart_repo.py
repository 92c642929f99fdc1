# marketplace/repos/cart_repo.py
from sqlalchemy import delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from marketplace.data.models.cart_item import CartItemModel
from marketplace.data.models.product import ProductModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(CartItemModel)
        if dialect == "sqlite":
            return sqlite.insert(CartItemModel)
        raise RuntimeError(f"Upsert nieobslugiwany dla dialektu {dialect}")

    def get_cart_item(self, user_id: int, product_id: int) -> CartItemModel | None:
        #UPDATE-y ida z pominieciem sesji, wiec wymuszamy swiezy odczyt
        return self.db.execute(
            select(CartItemModel)
            .where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
            )
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_lines(self, user_id: int, for_update: bool = False):
        """Pozycje koszyka z aktualna cena produktu (join w chwili odczytu)."""
        stmt = (
            select(
                CartItemModel.product_id,
                CartItemModel.quantity,
                ProductModel.name,
                ProductModel.price,
                ProductModel.image_url,
            )
            .join(ProductModel, CartItemModel.product_id == ProductModel.id)
            .where(CartItemModel.user_id == user_id)
            .order_by(CartItemModel.product_id)
        )
        if for_update:
            #blokujemy tylko wiersze koszyka, produkty zostaja wolne
            stmt = stmt.with_for_update(of=CartItemModel)
        return self.db.execute(stmt).all()

    def upsert_increment(self, user_id: int, product_id: int) -> None:
        #INSERT ... ON CONFLICT (user_id, product_id) DO UPDATE SET quantity = quantity + 1
        #jedna instrukcja, wiec dwa rownolegle dodania nie zrobia duplikatu wiersza
        stmt = self._insert().values(user_id=user_id, product_id=product_id, quantity=1)
        stmt = stmt.on_conflict_do_update(
            index_elements=[CartItemModel.user_id, CartItemModel.product_id],
            set_={"quantity": CartItemModel.quantity + 1},
        )
        self.db.execute(stmt)

    def increment(self, user_id: int, product_id: int) -> int:
        result = self.db.execute(
            update(CartItemModel)
            .where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
            )
            .values(quantity=CartItemModel.quantity + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def decrement(self, user_id: int, product_id: int) -> int:
        #warunek quantity > 1 w samym UPDATE, ilosc nigdy nie spadnie do 0
        result = self.db.execute(
            update(CartItemModel)
            .where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
                CartItemModel.quantity > 1,
            )
            .values(quantity=CartItemModel.quantity - 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_last_unit(self, user_id: int, product_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel)
            .where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
                CartItemModel.quantity <= 1,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_cart_item(self, user_id: int, product_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel)
            .where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def remove_lines(self, user_id: int, lines) -> int:
        """
        Usuwa dokladnie przeczytane pozycje: ten sam produkt i ta sama ilosc.
        Wiersz dodany lub zmieniony w miedzyczasie nie pasuje i zostaje.
        """
        removed = 0
        for line in lines:
            result = self.db.execute(
                delete(CartItemModel)
                .where(
                    CartItemModel.user_id == user_id,
                    CartItemModel.product_id == line.product_id,
                    CartItemModel.quantity == line.quantity,
                )
                .execution_options(synchronize_session=False)
            )
            removed += result.rowcount
        return removed

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
