"""
Resolve the dashboard admin behind a request.

The access token comes from the ``x-access-token`` header or the
``access_token`` cookie. When it is missing or expired, a refresh token whose
session is neither deleted nor revoked issues a new access token.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import is_authorized_email
from app.core.logging_config import get_logger, log_security_event
from app.crud.authCrud import get_account_by_id
from app.crud.sessionCrud import is_session_usable, update_last_active_at, verify_session
from app.db.postgresql import get_db
from app.models import Account
from app.security.jwt import (
    ACCESS_COOKIE_NAME,
    ACCESS_HEADER_NAME,
    REFRESH_COOKIE_NAME,
    create_access_token,
    set_auth_cookies,
    verify_refresh_token,
    verify_token,
)

logger = get_logger("auth.dependencies")


@dataclass
class ResolvedAuth:
    account: Optional[Account] = None
    session_id: Optional[str] = None
    new_access_token: Optional[str] = None

    @property
    def is_authorized(self) -> bool:
        return self.account is not None and is_authorized_email(self.account.email)


def token_claims(account: Account, session_id: str) -> dict:
    return {"account_id": str(account.id), "email": account.email, "session_id": session_id}


async def _active_account(db: AsyncSession, account_id: Optional[str]) -> Optional[Account]:
    if not account_id:
        return None
    account = await get_account_by_id(db, account_id)
    if account is None or not account.is_active:
        return None
    return account


async def resolve_auth(
    db: AsyncSession, request: Request, response: Optional[Response] = None
) -> ResolvedAuth:
    access_token = request.headers.get(ACCESS_HEADER_NAME) or request.cookies.get(ACCESS_COOKIE_NAME)
    if access_token:
        payload = verify_token(access_token)
        if payload:
            account = await _active_account(db, payload.get("account_id"))
            return ResolvedAuth(account=account, session_id=payload.get("session_id"))

    refresh_token = request.cookies.get(REFRESH_COOKIE_NAME)
    if not refresh_token:
        return ResolvedAuth()

    payload_refresh = verify_refresh_token(refresh_token)
    if payload_refresh is None:
        return ResolvedAuth()

    session_id = str(payload_refresh.get("session_id"))
    session_row = await verify_session(db, session_id)
    if not is_session_usable(session_row):
        logger.info("Refresh rejected: session deleted or revoked")
        return ResolvedAuth()

    account = await _active_account(db, payload_refresh.get("account_id"))
    if account is None:
        return ResolvedAuth()

    new_access_token = create_access_token(token_claims(account, session_id))
    await update_last_active_at(db, session_id)
    if response is not None:
        set_auth_cookies(response, new_access_token)

    return ResolvedAuth(account=account, session_id=session_id, new_access_token=new_access_token)


async def require_admin(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> Account:
    """REST guard: 401 without a valid login, 403 outside the allow-list."""
    auth = await resolve_auth(db, request, response)
    if auth.account is None:
        raise HTTPException(status_code=401, detail="No autenticado")
    if not auth.is_authorized:
        log_security_event("unauthorized_api_access", f"email={auth.account.email} path={request.url.path}")
        raise HTTPException(status_code=403, detail="No autorizado")
    return auth.account
