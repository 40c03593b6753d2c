from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from core.models import Base, TimestampMixin, id_column


class ProductionOrder(Base, TimestampMixin):
    __tablename__ = "production_orders"

    id = id_column()
    product_id = Column(String(36), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    status = Column(String(16), nullable=False, default="PLANNED")
    planned_date = Column(DateTime(timezone=True), nullable=False)
    completed_date = Column(DateTime(timezone=True), nullable=True)
    actual_cost = Column(Float, nullable=True)
    # Unit cost x quantity at creation time; None when the cost was unavailable
    estimated_cost = Column(Float, nullable=True)

    product = relationship("Product")
