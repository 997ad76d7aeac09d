import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

import config
from services.exceptions import RentalServiceError
from routers import (
    auth_router,
    properties_router,
    rentals_router,
    payments_router,
    receipts_router,
    dashboard_router,
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("todre")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.init_database and config.AUTO_CREATE_TABLES:
        from database import init_db
        init_db()
    yield


# Error handlers
async def service_error_handler(request: Request, exc: RentalServiceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{field}: {first.get('msg')}" if field else str(first.get("msg", "Invalid request"))
    return JSONResponse(status_code=400, content={"success": False, "message": message})


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(status_code=404, content={"success": False, "message": "Route not found"})
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": str(exc.detail)})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "message": "Internal server error"})


def create_app(init_database: bool = True) -> FastAPI:
    app = FastAPI(title="T-ODRE Rental Lifecycle API", lifespan=lifespan)
    app.state.init_database = init_database

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RentalServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(auth_router)
    app.include_router(properties_router)
    app.include_router(rentals_router)
    app.include_router(payments_router)
    app.include_router(receipts_router)
    app.include_router(dashboard_router)

    @app.get("/api/health", tags=["health"])
    def health():
        from database import check_connection
        return {"success": True, "database": "ok" if check_connection() else "unavailable"}

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=config.PORT, reload=True)
