"""
Stats Module - API Routes
===========================
Dashboard / report / financial page figures.

Endpoints:
  GET /api/stats/daily      - One day's totals (default: today, UTC)
  GET /api/stats/range      - Inclusive date-range totals
  GET /api/stats/overview   - Dashboard payload (today + outstanding loans + recent sales)
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from config.database import get_db
from modules.auth.deps import require_permission
from modules.stats.service import stats_service

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("/daily")
async def daily_stats(
    day: Optional[date] = Query(None),
    include_withdrawals: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
    actor=Depends(require_permission("viewFinancialDashboards")),
):
    stats = stats_service.daily_stats(db, day, include_withdrawals=include_withdrawals)
    return {"day": (day.isoformat() if day else None), "stats": stats.as_dict()}


@router.get("/range")
async def range_stats(
    start: date = Query(...),
    end: date = Query(...),
    db: Session = Depends(get_db),
    actor=Depends(require_permission("viewReports")),
):
    stats = stats_service.range_stats(db, start, end)
    return {"start": start.isoformat(), "end": end.isoformat(), "stats": stats.as_dict()}


@router.get("/overview")
async def overview(
    db: Session = Depends(get_db),
    actor=Depends(require_permission("viewFinancialDashboards")),
):
    return stats_service.get_overview(db)
