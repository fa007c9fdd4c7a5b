# storefront/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
import uvicorn

from storefront.api.routers import auth, cart, favorites, health, orders, payment
from storefront.data.database import Database
from storefront.data.seed import seed
from storefront.exceptions import StorefrontError
from storefront.services.session_store import SessionStore, connect
from storefront.utils.settings import DATABASE_URL, REDIS_URL, SEED_PRODUCTS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorefrontError)
    async def storefront_error(request: Request, exc: StorefrontError):
        if exc.__cause__ is not None:
            logger.error(f"{request.method} {request.url.path} failed: {exc!r} caused by {exc.__cause__!r}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc!r}")
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"Invalid value for {field}: {first.get('msg')}" if field else "Invalid request"
        return _error(422, message)

    # bledy magazynow nigdy nie ida do klienta doslownie
    @app.exception_handler(SQLAlchemyError)
    async def database_error(request: Request, exc: SQLAlchemyError):
        logger.error(f"{request.method} {request.url.path} database error: {exc}")
        return _error(503, "Storage is temporarily unavailable")

    @app.exception_handler(RedisError)
    async def redis_error(request: Request, exc: RedisError):
        logger.error(f"{request.method} {request.url.path} redis error: {exc}")
        return _error(503, "Session store is temporarily unavailable")


def create_app(database: Database | None = None, session_store: SessionStore | None = None) -> FastAPI:
    """
    Uchwyty do Ledger Store i Session Store tworzone raz przy starcie i zamykane przy shutdown.
    Przekazane z zewnatrz (np. w testach) naleza do wolajacego i nie sa zamykane.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned_db = database is None
        owned_store = session_store is None

        db = database or Database(DATABASE_URL)
        store = session_store or SessionStore(connect(REDIS_URL))

        logger.info("Initializing database...")
        db.create_all()
        if SEED_PRODUCTS:
            seed(db)

        app.state.database = db
        app.state.session_store = store
        try:
            yield
        finally:
            if owned_store:
                store.redis.close()
            if owned_db:
                db.dispose()
            logger.info("Storage handles closed")

    app = FastAPI(
        title="Storefront Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(cart.guest_router)
    app.include_router(cart.router)
    app.include_router(favorites.router)
    app.include_router(auth.router)
    app.include_router(orders.router)
    app.include_router(payment.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
