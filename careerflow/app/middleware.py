import logging
from collections.abc import Awaitable, Callable

import jwt
from fastapi import Request
from fastapi.responses import Response

from careerflow.app.core.config import Settings, get_settings
from careerflow.app.core.security import create_access_token

log = logging.getLogger(__name__)


async def refresh_session_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Refreshes session token on each request.

    If a valid, unexpired access token is found in the cookies, a new token
    with a renewed expiration time is issued and set in the response cookies.
    Active users therefore stay signed in.

    Args:
        request (Request): The incoming request object.
        call_next: The next middleware or route handler.

    Returns:
        Response: The response from the next handler, potentially with a new
                  session cookie.

    Notes:
        1.  Read the `access_token` cookie. Without one, pass the request through.
        2.  Decode it; on success issue a new token for the same subject.
        3.  Call the next handler.
        4.  Set the new token on the response, unless the handler itself
            changed the cookie (login or logout).
        5.  An invalid or expired token is ignored here; the auth dependencies
            reject the request.

    """
    log.debug("refresh_session_middleware: starting")
    new_token: str | None = None
    access_token: str | None = request.cookies.get("access_token")

    if not access_token:
        log.debug("refresh_session_middleware: no token, passing through")
        return await call_next(request)

    settings: Settings = get_settings()

    try:
        payload = jwt.decode(
            access_token,
            settings.secret_key,
            algorithms=[settings.algorithm],
        )
        subject = payload.get("sub")
        if subject:
            new_token = create_access_token(data={"sub": subject}, settings=settings)
            _msg = "Token refreshed."
            log.debug(_msg)
    except jwt.PyJWTError as e:
        _msg = f"Token decoding failed: {e}. Letting auth dependency handle it."
        log.debug(_msg)

    response = await call_next(request)

    cookie_already_set = any(
        header.startswith("access_token=")
        for header in response.headers.getlist("set-cookie")
    )
    if new_token and not cookie_already_set:
        response.set_cookie(
            key="access_token",
            value=new_token,
            httponly=True,
            samesite="lax",
            path="/",
            secure=settings.secure_cookies,
        )
        _msg = "New session token set in response cookie."
        log.debug(_msg)

    log.debug("refresh_session_middleware: returning")
    return response
