# marketplace/data/models/provider_set.py
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from marketplace.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class ProviderSetModel(Base):
    """Oferta providera: cena i stan dla zestawu z katalogu."""

    __tablename__ = "provider_sets"

    id = Column(Integer, primary_key=True)
    provider_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    set_id = Column(Integer, ForeignKey("sets.id"), nullable=False)

    price = Column(Numeric(10, 2), nullable=False)
    available_quantity = Column(Integer, nullable=False, default=0)

    is_active = Column(Boolean, nullable=False, default=True)
    provider_visible = Column(Boolean, nullable=False, default=True)
    admin_visible = Column(Boolean, nullable=False, default=True)
    admin_status = Column(String(20), nullable=False, default="pending")  # pending, approved, rejected
    admin_notes = Column(Text, nullable=True)

    #optimistic locking, podbijane przy kazdej zmianie (edycja i checkout)
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    catalog_set = relationship("CatalogSetModel")

    __table_args__ = (
        UniqueConstraint("provider_id", "set_id", name="uq_provider_sets_provider_set"),
        CheckConstraint("available_quantity >= 0", name="ck_provider_sets_quantity_non_negative"),
        CheckConstraint("price >= 0", name="ck_provider_sets_price_non_negative"),
    )
