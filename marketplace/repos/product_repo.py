from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import Session

from marketplace.data.models.cart_item import CartItemModel
from marketplace.data.models.order import OrderModel
from marketplace.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_owned(self, product_id: int, seller_id: int) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel).where(
                ProductModel.id == product_id,
                ProductModel.seller_id == seller_id,
            )
        ).scalar_one_or_none()

    def random_categories(self, limit: int) -> list[str]:
        stmt = (
            select(ProductModel.category)
            .group_by(ProductModel.category)
            .order_by(func.random())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars())

    def all_categories(self) -> list[str]:
        stmt = select(ProductModel.category).distinct().order_by(ProductModel.category)
        return list(self.db.execute(stmt).scalars())

    def by_categories(self, categories: list[str]) -> list[ProductModel]:
        if not categories:
            return []
        stmt = (
            select(ProductModel)
            .where(ProductModel.category.in_(categories))
            .order_by(ProductModel.category, ProductModel.id)
        )
        return list(self.db.execute(stmt).scalars())

    def by_category(self, category: str) -> list[ProductModel]:
        stmt = select(ProductModel).where(ProductModel.category == category).order_by(ProductModel.id)
        return list(self.db.execute(stmt).scalars())

    def by_seller(self, seller_id: int) -> list[ProductModel]:
        stmt = select(ProductModel).where(ProductModel.seller_id == seller_id).order_by(ProductModel.id)
        return list(self.db.execute(stmt).scalars())

    def search(self, query: str) -> list[ProductModel]:
        pattern = f"%{query}%"
        stmt = (
            select(ProductModel)
            .where(
                or_(
                    ProductModel.name.ilike(pattern),
                    ProductModel.description.ilike(pattern),
                    ProductModel.category.ilike(pattern),
                )
            )
            .order_by(ProductModel.id)
        )
        return list(self.db.execute(stmt).scalars())

    def add_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def delete_product(self, product_id: int) -> None:
        #koszyki traca produkt, zamowienia zostaja z zapisana cena
        self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.product_id == product_id)
            .execution_options(synchronize_session=False)
        )
        self.db.execute(
            update(OrderModel)
            .where(OrderModel.product_id == product_id)
            .values(product_id=None)
            .execution_options(synchronize_session=False)
        )
        self.db.execute(
            delete(ProductModel)
            .where(ProductModel.id == product_id)
            .execution_options(synchronize_session=False)
        )
