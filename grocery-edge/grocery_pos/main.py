from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from grocery_pos.api.v1.routes_backup import router as backup_router
from grocery_pos.api.v1.routes_checkout import router as checkout_router
from grocery_pos.api.v1.routes_coupons import router as coupons_router
from grocery_pos.api.v1.routes_customers import router as customers_router
from grocery_pos.api.v1.routes_inventory import router as inventory_router
from grocery_pos.api.v1.routes_reports import router as reports_router
from grocery_pos.api.v1.routes_sync import router as sync_router
from grocery_pos.core.config import settings
from grocery_pos.core.errors import (
    BusinessError,
    ConnectivityError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from grocery_pos.core.logging import setup_logging
from grocery_pos.runtime import PosRuntime


ERROR_STATUS = (
    (ValidationError, 422),
    (NotFoundError, 404),
    (BusinessError, 409),
    (ConnectivityError, 503),
)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            break
    else:
        status_code = 400
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


def create_app(runtime: Optional[PosRuntime] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.LOG_LEVEL)
        pos = runtime or PosRuntime()
        app.state.runtime = pos
        await pos.initialize()
        try:
            yield
        finally:
            await pos.shutdown()

    app = FastAPI(title="Grocery POS edge", lifespan=lifespan)
    if runtime is not None:
        # usable without running the lifespan, e.g. under httpx.ASGITransport
        app.state.runtime = runtime

    app.add_exception_handler(DomainError, domain_error_handler)

    app.include_router(checkout_router)
    app.include_router(inventory_router)
    app.include_router(customers_router)
    app.include_router(sync_router)
    app.include_router(reports_router)
    app.include_router(coupons_router)
    app.include_router(backup_router)

    @app.get("/health")
    async def health(request: Request):
        pos: PosRuntime = request.app.state.runtime
        return {"status": "ok", "online": pos.connectivity.online}

    return app


app = create_app()
