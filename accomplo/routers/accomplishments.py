import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query

from ..deps import get_current_profile, get_now, get_store
from ..schemas import AccomplishmentCreate, ProfileOut, WeekOut, WeeksOut
from ..stores import NotFound, Store
from ..weeks import bucket_by_week

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accomplishments", tags=["accomplishments"])

@router.post("")
def create_accomplishment(
    payload: AccomplishmentCreate,
    profile: ProfileOut = Depends(get_current_profile),
    store: Store = Depends(get_store),
):
    a = store.create_accomplishment(profile, payload.content, payload.type, payload.category)
    logger.info("[accomplishments] %s (%s) added to profile %s", a.id, a.type, profile.id)
    return {"ok": True, "accomplishment": a.model_dump(mode="json")}

@router.get("")
def list_accomplishments(
    limit: int = Query(100, ge=1, le=500),
    profile: ProfileOut = Depends(get_current_profile),
    store: Store = Depends(get_store),
):
    rows = store.list_accomplishments(profile)[:limit]
    return [r.model_dump(mode="json") for r in rows]

@router.get("/weeks")
def list_weeks(
    profile: ProfileOut = Depends(get_current_profile),
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
):
    """
    Accomplishments grouped Sunday..Saturday, most recent week first.
    A locked week (current week before Sunday 18:00) shows its count only.
    """
    buckets = bucket_by_week(store.list_accomplishments(profile), now)
    weeks = [
        WeekOut(
            week_start=b.week_start,
            week_end=b.week_end,
            is_current_week=b.is_current_week,
            is_revealed=b.is_revealed,
            count=b.count,
            accomplishments=b.accomplishments if b.is_revealed else None,
        )
        for b in buckets
    ]
    return WeeksOut(now=now, weeks=weeks).model_dump(mode="json")

@router.delete("/{accomplishment_id}")
def delete_accomplishment(
    accomplishment_id: str,
    profile: ProfileOut = Depends(get_current_profile),
    store: Store = Depends(get_store),
):
    try:
        store.delete_accomplishment(profile, accomplishment_id)
    except NotFound:
        raise HTTPException(404, "Accomplishment not found")
    logger.info("[accomplishments] %s deleted from profile %s", accomplishment_id, profile.id)
    return {"ok": True}
