from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Text

from marketplace.data.database import Base


class CatalogSetModel(Base):
    __tablename__ = "sets"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True)
    difficulty_level = Column(String(50), nullable=True)
    base_price = Column(Numeric(10, 2), nullable=True)

    active = Column(Boolean, nullable=False, default=True)
    admin_visible = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
