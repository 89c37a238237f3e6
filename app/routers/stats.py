from fastapi import APIRouter, Depends

from app.dependencies import get_report_store
from app.schemas.stats import Stats
from app.services.report_store import ReportStore
from app.services.stats import compute_stats

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=Stats)
async def get_stats(store: ReportStore = Depends(get_report_store)):
    return await compute_stats(store)
