from sqlalchemy import Column, Integer, String

from marketplace.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(100), nullable=False)  # hash bcrypt
    phone = Column(String(30))
    address = Column(String(500))
