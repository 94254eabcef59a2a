# bledor/routes/stats.py
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bledor.core import stats
from bledor.core.access import Actor
from bledor.database import get_db
from bledor.schemas.stats import PeriodSummary, StatusCounts
from bledor.utils.tokenJWT import resolve_actor

router = APIRouter(
    prefix="/stats",
    tags=["Stats"]
)


# === Manager dashboard: today's orders per status ===

@router.get("/today", response_model=StatusCounts)
def get_today_counts(
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    return stats.todays_status_counts(db, actor)


# === Owner dashboard: realized sales over a window (default: today) ===

@router.get("/summary", response_model=PeriodSummary)
def get_stats_summary(
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
    actor: Optional[Actor] = Depends(resolve_actor),
):
    return stats.period_summary(db, actor, date_from=date_from, date_to=date_to)
