"""
Thin wrapper around the stored procedures that own the studio's multi-step
business rules (credits, bikes, waitlist, weekly generation).

The procedures live in the database; this module only marshals named
parameters, unwraps the JSON they return and turns database errors into
``RpcError`` so callers can map them to user-facing messages.
"""
import json
from typing import Any, Iterable, Optional, Sequence, Tuple

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging_config import get_logger
from app.db.postgresql import qualified_name

logger = get_logger("db.rpc")


class RpcError(Exception):
    """Raised when a stored procedure fails inside the database."""

    def __init__(self, function: str, message: str):
        super().__init__(message)
        self.function = function
        self.message = message


def _database_message(error: DBAPIError) -> str:
    raw = str(getattr(error, "orig", None) or error)
    # asyncpg errors are wrapped as "<class '...'>: message"
    if raw.startswith("<class") and ": " in raw:
        raw = raw.split(": ", 1)[1]
    return raw.strip()


async def call_rpc(db: AsyncSession, function: str, **params: Any) -> Any:
    """Call ``function`` with named arguments and return its decoded result."""
    arguments = ", ".join(f"{name} => :{name}" for name in params)
    stmt = text(f"SELECT {qualified_name(function)}({arguments}) AS result")

    logger.debug(f"Calling stored procedure {function} with {sorted(params)}")
    try:
        result = await db.execute(stmt, params)
        value = result.scalar()
        await db.commit()
    except DBAPIError as e:
        await db.rollback()
        message = _database_message(e)
        logger.error(f"Stored procedure {function} failed: {message}")
        raise RpcError(function, message) from e

    if isinstance(value, (str, bytes)):
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value


def rpc_failure_message(result: Any) -> Optional[str]:
    """Return the message of a ``{"success": false}`` payload, else None."""
    if isinstance(result, dict) and "success" in result and not result.get("success"):
        return result.get("message") or ""
    return None


def friendly_rpc_error(
    message: str,
    translations: Iterable[Tuple[Sequence[str], str]],
    default: str,
) -> str:
    """Translate a raw procedure error using the first matching substring rule."""
    friendly = default
    for needles, text_ in translations:
        if any(needle in message for needle in needles):
            friendly = text_
            break
    return f"{friendly} ({message})"
