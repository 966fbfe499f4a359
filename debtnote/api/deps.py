"""FastAPI dependency injection."""

import uuid

from fastapi import Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from debtnote.config import settings
from debtnote.models.context import RequestContext

engine = create_async_engine(settings.database_url, echo=settings.debug)
async_session = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncSession:
    async with async_session() as session:
        yield session


def get_context(
    x_user_id: str | None = Header(None),
    x_branch_id: str | None = Header(None),
) -> RequestContext:
    """Writer identity, forwarded by the authenticating proxy as headers."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    try:
        user_id = uuid.UUID(x_user_id)
        branch_id = uuid.UUID(x_branch_id) if x_branch_id else None
    except ValueError:
        raise HTTPException(status_code=400, detail="X-User-Id / X-Branch-Id must be UUIDs")
    return RequestContext(user_id=user_id, branch_id=branch_id)
