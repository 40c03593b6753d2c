from sqlalchemy import Column, DateTime, Float, ForeignKey, String

from core.models import Base, id_column, utcnow


class StockMovement(Base):
    __tablename__ = "stock_movements"

    id = id_column()
    raw_material_id = Column(String(36), ForeignKey("raw_materials.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(16), nullable=False)
    quantity = Column(Float, nullable=False)
    reason = Column(String(255), nullable=False, default="")
    production_order_id = Column(String(36), ForeignKey("production_orders.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
