from sqlalchemy import Column, DateTime, Float, ForeignKey, String

from core.models import Base, id_column


class CostSnapshot(Base):
    """Last persisted cost calculation of a product."""

    __tablename__ = "cost_snapshots"

    id = id_column()
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, unique=True)
    raw_materials_cost = Column(Float, nullable=False)
    labor_cost = Column(Float, nullable=False)
    indirect_costs = Column(Float, nullable=False)
    loss_cost = Column(Float, nullable=False)
    total_production_cost = Column(Float, nullable=False)
    fixed_cost_allocation = Column(Float, nullable=False)
    total_unit_cost = Column(Float, nullable=False)
    profit_margin = Column(Float, nullable=False)
    profit_margin_percentage = Column(Float, nullable=False)
    break_even_point = Column(Float, nullable=False)
    contribution_margin = Column(Float, nullable=False)
    calculated_at = Column(DateTime(timezone=True), nullable=False)
