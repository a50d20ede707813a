"""Transaction boundary used by every mutating application service.

    async with unit_of_work(db):
        ...  # repository calls

Commits on success. On any exception the session is rolled back and the
exception re-raised; driver/database failures surface as StorageError so the
caller never sees a partially applied ledger. Nothing is retried: the ledger
operations are not idempotent.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.fm_common.errors import StorageError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def unit_of_work(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    try:
        yield db
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Unit of work rolled back after storage failure")
        raise StorageError(type(exc).__name__) from exc
    except Exception:
        await db.rollback()
        raise
