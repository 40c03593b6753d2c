from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.database import init_db
from core.errors import register_exception_handlers
from core.logging_config import setup_logging
from core.settings import get_settings
from modules.analytics.router import router as analytics_router
from modules.costing.router import router as costing_router
from modules.production_orders.router import router as production_orders_router
from modules.products.router import router as products_router
from modules.raw_materials.router import router as raw_materials_router
from modules.stock.router import router as stock_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level, json_output=settings.log_json)
    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(raw_materials_router)
    app.include_router(products_router)
    app.include_router(costing_router)
    app.include_router(stock_router)
    app.include_router(production_orders_router)
    app.include_router(analytics_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
