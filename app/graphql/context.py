from dataclasses import dataclass

from fastapi import Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession
from strawberry.fastapi import BaseContext

from app.auth.dependencies import resolve_auth
from app.core.logging_config import log_security_event
from app.db.postgresql import get_db
from app.models import Account


@dataclass
class Context(BaseContext):
    db: AsyncSession
    request: Request
    response: Response
    # Logged-in account, whether or not it is allow-listed
    account: Account | None = None
    # Only set for allow-listed admins
    user: Account | None = None
    session_id: str | None = None


async def build_context(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> Context:
    auth = await resolve_auth(db, request, response)

    user = auth.account if auth.is_authorized else None
    if auth.account is not None and user is None:
        log_security_event("unauthorized_graphql_access", f"email={auth.account.email}")

    return Context(
        db=db,
        request=request,
        response=response,
        account=auth.account,
        user=user,
        session_id=auth.session_id,
    )
