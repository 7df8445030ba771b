from sqlalchemy import Boolean, Column, Integer, String

from marketplace.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String(100), nullable=False, unique=True)
    role = Column(String(20), nullable=False)  # admin, provider, customer, production
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    company_name = Column(String(200), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
