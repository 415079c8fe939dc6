import os
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.core.logging_config import get_logger

logger = get_logger("auth.jwt")

SECRET_KEY_ACCESS_TOKEN = os.getenv("SECRET_KEY_ACCESS_TOKEN", "super-secret")
SECRET_KEY_REFRESH_TOKEN = os.getenv("SECRET_KEY_REFRESH_TOKEN", "super-secret1")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 15))
REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", 15))

ACCESS_COOKIE_NAME = "access_token"
REFRESH_COOKIE_NAME = "refresh_token"
ACCESS_HEADER_NAME = "x-access-token"


def get_cookie_secure_setting():
    """Return secure cookie setting based on environment"""
    return os.getenv("ENVIRONMENT", "development") == "production"


def get_cookie_samesite_setting():
    """Return samesite cookie setting based on environment"""
    if os.getenv("ENVIRONMENT", "development") == "production":
        return "strict"
    return "lax"


def get_access_cookie_max_age_seconds() -> int:
    return ACCESS_TOKEN_EXPIRE_MINUTES * 60


def get_refresh_cookie_max_age_seconds() -> int:
    return REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60


def create_refresh_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS))
    logger.debug(f"Refresh token expires at: {expire}")
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY_REFRESH_TOKEN, algorithm=ALGORITHM)


def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    logger.debug(f"Access token expires at: {expire}")
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY_ACCESS_TOKEN, algorithm=ALGORITHM)


def verify_token(token: str):
    try:
        return jwt.decode(token, SECRET_KEY_ACCESS_TOKEN, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"Error verifying access token: {e}")
        return None


def verify_refresh_token(token: str):
    try:
        return jwt.decode(token, SECRET_KEY_REFRESH_TOKEN, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"Error verifying refresh token: {e}")
        return None


def set_auth_cookies(response, access_token: str, refresh_token: str | None = None) -> None:
    """Attach the access token (header + cookie) and optionally the refresh cookie."""
    response.headers[ACCESS_HEADER_NAME] = access_token
    response.set_cookie(
        key=ACCESS_COOKIE_NAME,
        value=access_token,
        httponly=True,
        secure=get_cookie_secure_setting(),
        samesite=get_cookie_samesite_setting(),
        max_age=get_access_cookie_max_age_seconds(),
    )
    if refresh_token:
        response.set_cookie(
            key=REFRESH_COOKIE_NAME,
            value=refresh_token,
            httponly=True,
            secure=get_cookie_secure_setting(),
            samesite=get_cookie_samesite_setting(),
            max_age=get_refresh_cookie_max_age_seconds(),
        )


def clear_auth_cookies(response) -> None:
    response.delete_cookie(ACCESS_COOKIE_NAME)
    response.delete_cookie(REFRESH_COOKIE_NAME)
