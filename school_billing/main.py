# school_billing/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from school_billing.api.errors import ERROR_RESPONSES, register_exception_handlers
from school_billing.api.routers import fee_types as fee_types_router
from school_billing.api.routers import fee_structures as fee_structures_router
from school_billing.api.routers import vouchers as vouchers_router
from school_billing.api.routers import generation as generation_router
from school_billing.core.config import settings
from school_billing.core.db import create_tables

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def create_app() -> FastAPI:
    app = FastAPI(title="School Fee Billing", version="1.0.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        if request.url.path.startswith(API_PREFIX):
            logger.info(f"{request.method} {request.url.path}")
        return await call_next(request)

    register_exception_handlers(app)

    # Catalogs
    app.include_router(fee_types_router.router, prefix=API_PREFIX, responses=ERROR_RESPONSES)
    app.include_router(fee_structures_router.router, prefix=API_PREFIX, responses=ERROR_RESPONSES)

    # Vouchers, payments and generation
    app.include_router(vouchers_router.router, prefix=API_PREFIX, responses=ERROR_RESPONSES)
    app.include_router(generation_router.router, prefix=API_PREFIX, responses=ERROR_RESPONSES)

    @app.get("/healthz")
    def health():
        return {"ok": True}

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn

    # Local runs without alembic; deployed databases are migrated instead
    create_tables()
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)
