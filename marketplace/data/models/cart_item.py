from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer
from sqlalchemy.orm import relationship

from marketplace.data.database import Base


class CartItemModel(Base):
    __tablename__ = "cart_items"

    #klucz zlozony (user, product) - jeden wiersz na pare, upsert opiera sie na tym kluczu
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)

    quantity = Column(Integer, nullable=False, default=1)

    product = relationship("ProductModel")

    __table_args__ = (CheckConstraint("quantity >= 1", name="ck_cart_items_quantity_positive"),)
