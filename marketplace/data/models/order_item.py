from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Numeric
from sqlalchemy.orm import relationship

from marketplace.data.database import Base


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    set_id = Column(Integer, ForeignKey("sets.id"), nullable=False)
    provider_set_id = Column(Integer, ForeignKey("provider_sets.id"), nullable=False)

    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    line_total = Column(Numeric(12, 2), nullable=False)

    order = relationship("OrderModel", back_populates="items")
    catalog_set = relationship("CatalogSetModel")

    __table_args__ = (CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),)
