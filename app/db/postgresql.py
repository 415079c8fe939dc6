from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from app.core.config import DATABASE_URL, DB_SCHEMA, SQL_ECHO

engine = create_async_engine(
    DATABASE_URL,
    echo=SQL_ECHO,
)

SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


class Base(DeclarativeBase):
    metadata = MetaData(schema=DB_SCHEMA or None)


def qualified_name(name: str) -> str:
    """Prefix a database object name with the configured schema."""
    return f"{DB_SCHEMA}.{name}" if DB_SCHEMA else name


async def get_db() -> AsyncSession:
    async with SessionLocal() as session:
        yield session
