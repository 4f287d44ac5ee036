import logging

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBearer

from kos_market.api.middleware import authenticate_request, init_firebase
from kos_market.api.routes import listings
from kos_market.api.routes.admin import router as admin_listings_router
from kos_market.core.config import config
from kos_market.core.errors import ServiceError
from kos_market.core.log_config import setup_logging
from kos_market.db.database import init_db
from kos_market.models.enums.error_kind import ErrorKind
from kos_market.schemas.lifecycle_schema import ApiFailure

logger = logging.getLogger(__name__)

security = HTTPBearer()


async def lifespan(app: FastAPI):
    # Perform startup tasks
    setup_logging()
    init_firebase()
    if config.testing != "1":
        await init_db()
    logger.info("%s started (%s)", config.app_name, config.render_env)
    yield


app = FastAPI(
    title=config.app_name, dependencies=[Depends(security)], lifespan=lifespan
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(
        status_code=exc.status_code,
        content=ApiFailure(error=exc.kind, message=exc.message).model_dump(mode="json"),
    )


# malformed ids and bodies are reported as InvalidInput, not as 422
@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": list(error["loc"]), "msg": error["msg"]} for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ApiFailure(
            error=ErrorKind.INVALID_INPUT,
            message="Invalid request parameters.",
            details=details,
        ).model_dump(mode="json"),
    )


app.include_router(admin_listings_router)
app.include_router(listings.router)
app.middleware("http")(authenticate_request)
