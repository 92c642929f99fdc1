from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel
from marketplace.data.models.seller import SellerModel
from marketplace.domain.errors import DuplicateEmailError, NotFoundError
from marketplace.domain.schemas import (
    ProductEditForm,
    ProductForm,
    ProductOut,
    SalesRow,
    SellerProfileForm,
    SellerRead,
    SellerSignupForm,
)
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.seller_repo import SellerRepo
from marketplace.utils.security import hash_password, verify_password
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class SellerService:
    """
    Konto sprzedawcy i jego produkty.
    Produkt edytuje i usuwa tylko wlasciciel - cudzy produkt wyglada jak nieistniejacy.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = SellerRepo(db)
        self.products = ProductRepo(db)

    # =====================================================
    # KONTO
    # =====================================================
    def create_seller(self, payload: SellerSignupForm) -> SellerRead:
        if self.repo.get_by_email(payload.email):
            raise DuplicateEmailError("Konto sprzedawcy z tym adresem email już istnieje")

        seller = SellerModel(
            name=payload.name,
            store_name=payload.store_name,
            email=payload.email,
            password=hash_password(payload.password),
            phone=payload.phone,
            address=payload.address,
        )
        try:
            created = self.repo.create_seller(seller)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateEmailError("Konto sprzedawcy z tym adresem email już istnieje")

        logger.info(f"Nowy sprzedawca {created.id} ({created.store_name})")
        return SellerRead.model_validate(created)

    def authenticate(self, email: str, password: str) -> SellerRead | None:
        seller = self.repo.get_by_email(email)
        if not seller or not verify_password(password, seller.password):
            return None
        return SellerRead.model_validate(seller)

    def get_seller(self, seller_id: int) -> SellerRead:
        seller = self.repo.get_seller(seller_id)
        if not seller:
            raise NotFoundError("Sprzedawca nie istnieje")
        return SellerRead.model_validate(seller)

    def update_profile(self, seller_id: int, payload: SellerProfileForm) -> SellerRead:
        seller = self.repo.get_seller(seller_id)
        if not seller:
            raise NotFoundError("Sprzedawca nie istnieje")

        seller.name = payload.name
        seller.store_name = payload.store_name
        seller.phone = payload.phone
        seller.address = payload.address
        self.db.commit()

        return SellerRead.model_validate(seller)

    def dashboard(self, seller_id: int) -> list[SalesRow]:
        return [
            SalesRow(
                id=row.id,
                name=row.name,
                image_url=row.image_url,
                total_quantity_sold=int(row.total_quantity_sold),
                total_revenue=Decimal(str(row.total_revenue)),
            )
            for row in self.repo.sales_summary(seller_id)
        ]

    # =====================================================
    # PRODUKTY
    # =====================================================
    def list_products(self, seller_id: int) -> list[ProductOut]:
        return [ProductOut.model_validate(p) for p in self.products.by_seller(seller_id)]

    def get_product(self, seller_id: int, product_id: int) -> ProductOut:
        product = self.products.get_owned(product_id, seller_id)
        if not product:
            raise NotFoundError("Produkt nie istnieje")
        return ProductOut.model_validate(product)

    def add_product(self, seller_id: int, payload: ProductForm) -> ProductOut:
        product = ProductModel(seller_id=seller_id, **payload.model_dump())
        created = self.products.add_product(product)
        self.db.commit()

        logger.info(f"Sprzedawca {seller_id} wystawil produkt {created.id}")
        return ProductOut.model_validate(created)

    def edit_product(self, seller_id: int, product_id: int, payload: ProductEditForm) -> ProductOut:
        product = self.products.get_owned(product_id, seller_id)
        if not product:
            raise NotFoundError("Produkt nie istnieje")

        for field, value in payload.model_dump(exclude={"image_url"}).items():
            setattr(product, field, value)
        if payload.image_url:
            product.image_url = payload.image_url
        self.db.commit()

        return ProductOut.model_validate(product)

    def delete_product(self, seller_id: int, product_id: int) -> None:
        if not self.products.get_owned(product_id, seller_id):
            raise NotFoundError("Produkt nie istnieje")

        try:
            self.products.delete_product(product_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Sprzedawca {seller_id} usunal produkt {product_id}")
