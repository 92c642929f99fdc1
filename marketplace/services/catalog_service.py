from collections import defaultdict

from sqlalchemy.orm import Session

from marketplace.domain.errors import NotFoundError
from marketplace.domain.schemas import ProductOut
from marketplace.repos.product_repo import ProductRepo

HOME_CATEGORIES = 10


class CatalogService:
    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def home(self) -> dict[str, list[ProductOut]]:
        categories = self.repo.random_categories(HOME_CATEGORIES)

        grouped: dict[str, list[ProductOut]] = defaultdict(list)
        for product in self.repo.by_categories(categories):
            grouped[product.category].append(ProductOut.model_validate(product))
        return dict(grouped)

    def categories(self) -> list[str]:
        return self.repo.all_categories()

    def category(self, name: str) -> list[ProductOut]:
        return [ProductOut.model_validate(p) for p in self.repo.by_category(name)]

    def product(self, product_id: int) -> ProductOut:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return ProductOut.model_validate(product)

    def search(self, query: str) -> list[ProductOut]:
        return [ProductOut.model_validate(p) for p in self.repo.search(query)]
