from sqlalchemy import Boolean, Column, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from marketplace.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    seller_id = Column(Integer, ForeignKey("sellers.id"), nullable=False, index=True)

    name = Column(String(200), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    category = Column(String(100), nullable=False, index=True)
    description = Column(Text)
    brand = Column(String(100))
    color = Column(String(50))
    size = Column(String(50))
    currency = Column(String(10))
    availability = Column(Boolean, nullable=False, default=True)
    image_url = Column(String(500))

    seller = relationship("SellerModel", back_populates="products")
