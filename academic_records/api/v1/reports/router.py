from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from academic_records.api.v1.students.schemas import StudentWithStats
from academic_records.db.session import get_db

from .schemas import StatsResponse, SubjectPerformance
from . import service

router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


@router.get("/stats", response_model=StatsResponse)
async def get_stats(db: AsyncSession = Depends(get_db)):
    return await service.compute_stats(db)


@router.get("/top-performers", response_model=List[StudentWithStats])
async def get_top_performers(
    limit: int = Query(service.DEFAULT_TOP_PERFORMERS, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    return await service.top_performers(db, limit=limit)


@router.get("/subject-performance", response_model=List[SubjectPerformance])
async def get_subject_performance(db: AsyncSession = Depends(get_db)):
    return await service.subject_performance(db)
