from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.data.models.product import ProductModel
from marketplace.data.models.seller import SellerModel


class SellerRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_seller(self, seller_id: int) -> SellerModel | None:
        return self.db.get(SellerModel, seller_id)

    def get_by_email(self, email: str) -> SellerModel | None:
        return self.db.execute(
            select(SellerModel)
            .where(SellerModel.email == email)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def create_seller(self, seller: SellerModel) -> SellerModel:
        self.db.add(seller)
        self.db.flush()
        return seller

    def update_password(self, email: str, password_hash: str) -> int:
        result = self.db.execute(
            update(SellerModel)
            .where(SellerModel.email == email)
            .values(password=password_hash)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def sales_summary(self, seller_id: int):
        """Sprzedaz per produkt sprzedawcy, takze produkty bez zamowien."""
        total_quantity = func.coalesce(func.sum(OrderModel.quantity), 0)
        total_revenue = func.coalesce(func.sum(OrderModel.total_price), 0)

        stmt = (
            select(
                ProductModel.id,
                ProductModel.name,
                ProductModel.image_url,
                total_quantity.label("total_quantity_sold"),
                total_revenue.label("total_revenue"),
            )
            .outerjoin(OrderModel, OrderModel.product_id == ProductModel.id)
            .where(ProductModel.seller_id == seller_id)
            .group_by(ProductModel.id, ProductModel.name, ProductModel.image_url)
            .order_by(total_quantity.desc(), ProductModel.id)
        )
        return self.db.execute(stmt).all()
