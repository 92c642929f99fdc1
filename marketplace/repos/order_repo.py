# marketplace/repos/order_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.data.models.product import ProductModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_orders(self, orders: list[OrderModel]) -> list[OrderModel]:
        self.db.add_all(orders)
        self.db.flush()
        return orders

    def list_for_user(self, user_id: int):
        """Zamowienia od najnowszych, z danymi produktu jesli jeszcze istnieje."""
        stmt = (
            select(OrderModel, ProductModel.name, ProductModel.image_url)
            .outerjoin(ProductModel, OrderModel.product_id == ProductModel.id)
            .where(OrderModel.user_id == user_id)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        )
        return self.db.execute(stmt).all()
