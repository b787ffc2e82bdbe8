import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from jose import JWTError

from farm_catalog.core.actor_context import set_current_farm_id, clear_current_farm_id
from farm_catalog.core.i18n import Translator
from farm_catalog.core.security import decode_access_token
from farm_catalog.services.scope import Actor, Role

logger = logging.getLogger(__name__)


class ActorMiddleware(BaseHTTPMiddleware):
    """
    Identifies the actor of every authenticated request

    Flow:
    1. Extracts the JWT from the Authorization header
    2. Decodes it and reads role and farm_id
    3. Stores the Actor on request.state
    4. Sets farm_id in the ContextVar (log records carry it)

    Tokens are issued elsewhere; this service only verifies them.
    """

    # Routes that need no token
    PUBLIC_PATHS = [
        "/",
        "/health",
        "/docs",
        "/redoc",
        "/openapi.json",
        "/api/v1/openapi.json",
    ]

    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        # CORS preflight
        if request.method == "OPTIONS":
            return await call_next(request)

        if path in self.PUBLIC_PATHS or not path.startswith("/api/"):
            clear_current_farm_id()
            return await call_next(request)

        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return self._unauthorized(request, "Missing authentication token")

        token = auth_header.replace("Bearer ", "")

        try:
            payload = decode_access_token(token)
            actor = Actor(role=Role(payload.get("role")), farm_id=payload.get("farm_id"))
        except (JWTError, ValueError) as e:
            clear_current_farm_id()
            logger.info("[AUTH] Rejected token on %s: %s", path, e)
            return self._unauthorized(request, str(e))

        if actor.role == Role.FARMER and actor.farm_id is None:
            return self._unauthorized(request, "Invalid token: farm not identified")

        request.state.actor = actor
        set_current_farm_id(actor.farm_id)

        try:
            return await call_next(request)
        finally:
            clear_current_farm_id()

    def _unauthorized(self, request: Request, detail: str) -> JSONResponse:
        t = Translator(request.headers.get("Accept-Language"))
        return JSONResponse(
            status_code=401,
            content={
                "statusCode": 401,
                "error": "Unauthorized",
                "message": t("errors.unauthorized"),
                "detail": detail,
            },
        )
