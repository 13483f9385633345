# storefront/main.py
from fastapi import FastAPI, Request
import uvicorn

from storefront.api.responses import install_error_handlers
from storefront.api.routers import carts, checkout, coupons, health, orders
from storefront.data.database import Base, engine, init_db
from storefront.utils.logging import add_context, clear_context, configure_logging, get_logger

logger = get_logger(__name__)


def create_app(create_tables: bool = True) -> FastAPI:
    configure_logging()

    if create_tables:
        try:
            init_db()
            logger.info("Database tables ready", tables=sorted(Base.metadata.tables.keys()))
        except Exception as e:
            logger.error(f"Failed to create tables on {engine.url.render_as_string(hide_password=True)}: {e}")
            raise

    app = FastAPI(
        title="Storefront Cart & Order Service",
        version="1.0.0",
    )
    install_error_handlers(app)

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        # kazdy log z requestu dostaje metode i sciezke
        clear_context()
        add_context(method=request.method, path=request.url.path)
        try:
            return await call_next(request)
        finally:
            clear_context()

    # Include routers
    app.include_router(health.router)
    app.include_router(carts.router)
    app.include_router(checkout.router)
    app.include_router(orders.router)
    app.include_router(coupons.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
