from sqlalchemy import Column, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from core.models import Base, TimestampMixin, id_column


class Supplier(Base, TimestampMixin):
    __tablename__ = "suppliers"

    id = id_column()
    name = Column(String(255), nullable=False)
    contact = Column(String(255), nullable=False, default="")
    email = Column(String(255), nullable=False, default="")
    phone = Column(String(64), nullable=False, default="")
    lead_time_days = Column(Float, nullable=False, default=0.0)


class MaterialSupplierLink(Base):
    __tablename__ = "raw_material_suppliers"

    raw_material_id = Column(String(36), ForeignKey("raw_materials.id", ondelete="CASCADE"), primary_key=True)
    supplier_id = Column(String(36), ForeignKey("suppliers.id", ondelete="CASCADE"), primary_key=True)
    # First link is the preferred supplier
    position = Column(Integer, nullable=False, default=0)

    supplier = relationship("Supplier", lazy="joined")


class RawMaterial(Base, TimestampMixin):
    __tablename__ = "raw_materials"

    id = id_column()
    code = Column(String(64), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    unit = Column(String(32), nullable=False)
    unit_cost = Column(Float, nullable=False, default=0.0)
    current_stock = Column(Float, nullable=False, default=0.0)
    minimum_stock = Column(Float, nullable=False, default=0.0)
    waste_percentage = Column(Float, nullable=False, default=0.0)

    supplier_links = relationship(
        "MaterialSupplierLink",
        cascade="all, delete-orphan",
        order_by="MaterialSupplierLink.position",
    )

    @property
    def suppliers(self):
        return [link.supplier for link in self.supplier_links]
