# marketplace/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.responses import JSONResponse
import uvicorn

from marketplace.api import include_routers
from marketplace.data.database import Base, engine
from marketplace.domain.errors import ValidationError
from marketplace.utils.logging import get_logger

# IMPORT WSZYSTKICH MODELI NA POCZĄTKU (PRZED JAKIMKOLWIEK CREATE_ALL)
import marketplace.data.models  # noqa: F401

logger = get_logger(__name__)

CHECKOUT_PATH = "/checkout"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Initializing database, tables: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise
    logger.info("Database tables ready")
    yield


async def checkout_validation_handler(request: Request, exc: RequestValidationError):
    # checkout zwraca 400 {"error": ...}, reszta API zostaje przy 422 FastAPI
    if not request.url.path.startswith(CHECKOUT_PATH):
        return await request_validation_exception_handler(request, exc)

    details = [
        f"{'.'.join(str(part) for part in err.get('loc', ()) if part != 'body')}: {err.get('msg')}"
        for err in exc.errors()
    ]
    logger.info(f"Rejected checkout request: {details}")
    error = ValidationError("Invalid checkout request.", details)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app() -> FastAPI:
    app = FastAPI(
        title="Benefits Marketplace",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.add_exception_handler(RequestValidationError, checkout_validation_handler)
    return include_routers(app)


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
