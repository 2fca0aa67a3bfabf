import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.core.logging import setup_logging
from app.db.init_db import init_db
from app.api.routes import organizations as organizations_router
from app.api.routes import professionals as professionals_router
from app.api.routes import services as services_router
from app.api.routes import clients as clients_router
from app.api.routes import availability as availability_router
from app.api.routes import appointments as appointments_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    init_db()
    logger.info(f"{get_settings().APP_NAME} starting up")
    yield


app = FastAPI(title=get_settings().APP_NAME, debug=get_settings().DEBUG, lifespan=lifespan)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    # Infrastructure failure: the answer is unknown, not "no"
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content={"detail": {"code": "UNAVAILABLE", "message": "Service temporarily unavailable, try again"}},
    )


@app.get("/")
def root():
    return {"message": "Salon Scheduling API running"}


app.include_router(organizations_router.router)
app.include_router(professionals_router.router)
app.include_router(services_router.router)
app.include_router(clients_router.router)
app.include_router(availability_router.router)
app.include_router(appointments_router.router)
