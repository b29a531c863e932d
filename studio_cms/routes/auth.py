"""
Admin login and session routes.
The issued JWT is set as an httpOnly cookie and also returned in the body.
"""
from fastapi import APIRouter, Depends, Request, Response
import logging

from studio_cms.config import settings
from studio_cms.schemas import LoginRequest, TokenResponse
from studio_cms.utils.jwt_auth import (
    TOKEN_COOKIE_NAME,
    authenticate_user,
    create_access_token,
    verify_cms_token,
)
from studio_cms.utils.rate_limit import RATE_LIMITS, limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")


@router.post("/login", response_model=TokenResponse)
@limiter.limit(RATE_LIMITS["login"])
async def login(request: Request, response: Response, credentials: LoginRequest):
    """
    Exchange the admin password for an access token.

    Raises:
        HTTPException: 401 on a wrong password, 429 when rate limited
    """
    claims = authenticate_user(credentials.password)
    token = create_access_token(claims)
    expires_in = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    response.set_cookie(
        key=TOKEN_COOKIE_NAME,
        value=token,
        max_age=expires_in,
        httponly=True,
        secure=request.url.scheme == "https",
        samesite="lax",
    )
    logger.info(f"CMS login from {request.client.host if request.client else 'unknown'}")
    return TokenResponse(access_token=token, expires_in=expires_in)


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(TOKEN_COOKIE_NAME)
    return {"message": "Logged out"}


@router.get("/session")
async def get_session(claims: dict = Depends(verify_cms_token)):
    """Report the current session's subject and expiry."""
    return {"authenticated": True, "sub": claims.get("sub"), "role": claims.get("role"), "exp": claims.get("exp")}
