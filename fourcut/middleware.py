"""Application middleware."""
import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from .config import PUBLIC_PATHS, ROOT_PATH, USER_HEADER

logger = logging.getLogger(__name__)


class IdentityMiddleware(BaseHTTPMiddleware):
    """Attach the caller identity forwarded by the authenticating gateway.

    Credentials are verified upstream; this middleware only trusts the
    user id header and exposes it as ``request.state.user``.
    """

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if ROOT_PATH and path.startswith(ROOT_PATH):
            path = path[len(ROOT_PATH):] or "/"

        # Allow public paths
        if path in PUBLIC_PATHS:
            return await call_next(request)

        raw_user_id = request.headers.get(USER_HEADER)
        if raw_user_id is not None:
            try:
                user_id = int(raw_user_id)
            except ValueError:
                logger.warning("Rejected malformed %s header on %s", USER_HEADER, path)
            else:
                request.state.user = {"id": user_id}
                return await call_next(request)

        return JSONResponse(status_code=401, content={"detail": "Not authenticated"})
