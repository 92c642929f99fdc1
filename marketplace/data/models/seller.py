from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from marketplace.data.database import Base


class SellerModel(Base):
    __tablename__ = "sellers"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    store_name = Column(String(150), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(100), nullable=False)
    phone = Column(String(30))
    address = Column(String(500))

    products = relationship("ProductModel", back_populates="seller")
