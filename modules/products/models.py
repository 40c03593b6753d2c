from sqlalchemy import Column, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from core.models import Base, TimestampMixin, id_column


class Product(Base, TimestampMixin):
    __tablename__ = "products"

    id = id_column()
    code = Column(String(64), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    unit = Column(String(32), nullable=False, default="un")
    category = Column(String(128), nullable=False, default="Geral")
    sale_price = Column(Float, nullable=False)
    allocated_fixed_cost = Column(Float, nullable=False, default=0.0)
    production_time = Column(Float, nullable=False, default=0.0)
    average_loss_percentage = Column(Float, nullable=False, default=0.0)

    bom = relationship("BillOfMaterials", uselist=False, cascade="all, delete-orphan", back_populates="product")


class BillOfMaterials(Base, TimestampMixin):
    __tablename__ = "bills_of_materials"

    id = id_column()
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, unique=True)

    product = relationship("Product", back_populates="bom")
    items = relationship(
        "BOMItem", cascade="all, delete-orphan", back_populates="bom", order_by="BOMItem.position"
    )
    production_steps = relationship(
        "ProductionStep", cascade="all, delete-orphan", back_populates="bom", order_by="ProductionStep.position"
    )


class BOMItem(Base):
    __tablename__ = "bom_items"

    id = id_column()
    bom_id = Column(String(36), ForeignKey("bills_of_materials.id", ondelete="CASCADE"), nullable=False)
    raw_material_id = Column(String(36), ForeignKey("raw_materials.id", ondelete="RESTRICT"), nullable=False)
    quantity = Column(Float, nullable=False)
    unit = Column(String(32), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    bom = relationship("BillOfMaterials", back_populates="items")
    raw_material = relationship("RawMaterial", lazy="joined")


class ProductionStep(Base):
    __tablename__ = "production_steps"

    id = id_column()
    bom_id = Column(String(36), ForeignKey("bills_of_materials.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(String(1024), nullable=False, default="")
    time_minutes = Column(Float, nullable=False, default=0.0)
    labor_cost_per_hour = Column(Float, nullable=False, default=0.0)
    indirect_costs = Column(Float, nullable=False, default=0.0)
    average_loss = Column(Float, nullable=False, default=0.0)
    position = Column(Integer, nullable=False, default=0)

    bom = relationship("BillOfMaterials", back_populates="production_steps")
