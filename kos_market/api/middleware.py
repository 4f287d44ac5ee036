import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from firebase_admin import _apps, auth, credentials, initialize_app

from kos_market.core.config import config
from kos_market.models.enums.error_kind import ErrorKind
from kos_market.schemas.lifecycle_schema import ApiFailure

logger = logging.getLogger(__name__)

firebase_app = None


def init_firebase():
    global firebase_app
    if not _apps and config.testing != "1":
        cred = credentials.Certificate(config.firebase_credentials)
        firebase_app = initialize_app(cred)


def _reject(status_code: int, kind: ErrorKind, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiFailure(error=kind, message=message).model_dump(mode="json"),
    )


async def authenticate_request(request: Request, call_next):
    if request.url.path.startswith(("/docs", "/openapi.json", "/redoc")):
        return await call_next(request)

    auth_header = request.headers.get("Authorization")

    if not auth_header:
        return _reject(
            status.HTTP_401_UNAUTHORIZED,
            ErrorKind.UNAUTHORIZED,
            "Authorization header is missing",
        )

    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return _reject(
            status.HTTP_401_UNAUTHORIZED,
            ErrorKind.UNAUTHORIZED,
            "Invalid or missing authentication token",
        )

    # identity is injected through dependency overrides in tests
    if config.testing == "1":
        return await call_next(request)

    try:
        user = auth.verify_id_token(token, firebase_app)
    except (ValueError, auth.InvalidIdTokenError) as e:
        logger.info("Rejected token: %s", e)
        return _reject(
            status.HTTP_401_UNAUTHORIZED,
            ErrorKind.UNAUTHORIZED,
            "Invalid or expired token",
        )

    request.state.user = user
    return await call_next(request)
