import uuid

import strawberry
from fastapi import HTTPException, Request, Response
from user_agents import parse

from app.auth.dependencies import token_claims
from app.auth.hashing import verify_password
from app.core.config import is_authorized_email
from app.core.logging_config import get_logger, log_auth_event, log_security_event
from app.crud.authCrud import get_account, mark_login
from app.crud.sessionCrud import create_session, revoke_session
from app.graphql.auth.permissions import IsAuthenticated
from app.graphql.auth.types import LoginInput, TokenResponse
from app.graphql.common import ActionResponse, ok
from app.security.jwt import (
    clear_auth_cookies,
    create_access_token,
    create_refresh_token,
    set_auth_cookies,
)

logger = get_logger("graphql.auth")


def _device_name(user_agent: str | None) -> str | None:
    if not user_agent:
        return None
    ua = parse(user_agent)
    return f"{ua.device.family} - {ua.os.family} {ua.os.version_string}".strip()


@strawberry.type
class AuthMutation:
    @strawberry.mutation
    async def login(self, data: LoginInput, info: strawberry.Info) -> TokenResponse:
        request: Request = info.context.request
        response: Response = info.context.response
        db = info.context.db

        account = await get_account(db, data.email)
        if not account or not account.is_active or not verify_password(data.password, account.password_hash):
            log_auth_event("login", email=data.email, success=False)
            raise HTTPException(status_code=401, detail="Credenciales inválidas")

        if not is_authorized_email(account.email):
            log_security_event("unauthorized_login", f"email={account.email}")
            raise HTTPException(status_code=403, detail="No autorizado para acceder al dashboard")

        session_id = f"session-id{uuid.uuid4().hex}"
        claims = token_claims(account, session_id)
        refresh_token = create_refresh_token(claims)
        access_token = create_access_token(claims)

        user_agent = request.headers.get("user-agent")
        await create_session(
            db,
            account_id=account.id,
            session_id=session_id,
            refresh_token=refresh_token,
            device_name=_device_name(user_agent),
            ip_address=request.client.host if request.client else None,
            user_agent=user_agent,
        )
        await mark_login(db, account.id)

        set_auth_cookies(response, access_token, refresh_token)
        log_auth_event("login", email=account.email, session_id=session_id)
        return TokenResponse(access_token=access_token)

    @strawberry.mutation(permission_classes=[IsAuthenticated])
    async def logout(self, info: strawberry.Info) -> ActionResponse:
        session_id = info.context.session_id
        if session_id:
            await revoke_session(info.context.db, session_id)
        clear_auth_cookies(info.context.response)
        log_auth_event("logout", email=info.context.account.email, session_id=session_id)
        return ok("Sesión cerrada.")
