"""Database engine and session management."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from core.settings import get_settings
from core.models import Base

# Register every table on Base.metadata before create_all
from modules.raw_materials import models as raw_material_models  # noqa: F401
from modules.products import models as product_models  # noqa: F401
from modules.production_orders import models as production_order_models  # noqa: F401
from modules.stock import models as stock_models  # noqa: F401
from modules.costing import models as costing_models  # noqa: F401

settings = get_settings()

engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
