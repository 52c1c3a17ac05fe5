"""Statistics Routes — landing page and community counters."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from aixchange.infrastructure.database import get_db
from aixchange.services import stats

router = APIRouter(prefix="/api", tags=["stats"])


@router.get("/stats")
async def platform_stats(db: AsyncSession = Depends(get_db)):
    return await stats.platform_stats(db)


@router.get("/community/stats")
async def community_stats(db: AsyncSession = Depends(get_db)):
    return await stats.community_stats(db)
