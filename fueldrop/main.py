import logging
import sys
from contextlib import asynccontextmanager

import asyncpg
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from redis.exceptions import RedisError

from fueldrop.actors import ActorKind
from fueldrop.config import settings
from fueldrop.db import close_pool, get_pool, init_schema
from fueldrop.errors import FuelDropError, StoreError
from fueldrop.metrics import get_metrics_bytes, get_metrics_content_type
from fueldrop.routes import auth, customer, dealer, delivery_boy, public
from fueldrop.routes.profiles import make_profile_router
from fueldrop.sessions import close_redis, get_redis

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await get_redis()
    if settings.create_schema_on_startup:
        await init_schema(await get_pool())
        logger.info("Schema ready")
    yield
    await close_redis()
    await close_pool()


app = FastAPI(title="FuelDrop", lifespan=lifespan)
app.include_router(auth.router)
app.include_router(public.router)
app.include_router(dealer.router)
app.include_router(customer.router)
app.include_router(delivery_boy.router)
for kind in ActorKind:
    app.include_router(make_profile_router(kind))


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@app.exception_handler(FuelDropError)
async def handle_fueldrop_error(request: Request, exc: FuelDropError) -> JSONResponse:
    if isinstance(exc, StoreError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _failure(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
    else:
        message = "Invalid request"
    return _failure(400, message)


@app.exception_handler(asyncpg.PostgresError)
@app.exception_handler(asyncpg.InterfaceError)
@app.exception_handler(RedisError)
@app.exception_handler(OSError)
async def handle_store_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("%s %s: store failure", request.method, request.url.path, exc_info=exc)
    return _failure(StoreError.status_code, StoreError.default_message)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.get("/metrics")
async def metrics() -> Response:
    """Prometheus scrape endpoint: orders placed, order transitions by outcome."""
    return Response(
        content=get_metrics_bytes(),
        media_type=get_metrics_content_type(),
    )


def run() -> None:
    import uvicorn

    uvicorn.run("fueldrop.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
