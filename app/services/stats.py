from app.models.report import ReportPriority, ReportStatus
from app.schemas.stats import Stats
from app.services.report_store import ReportStore


async def compute_stats(store: ReportStore) -> Stats:
    """Recount on every call; the four counts are independent queries."""
    return Stats(
        total=await store.count_where(),
        pending=await store.count_where(status=ReportStatus.PENDING.value),
        resolved=await store.count_where(status=ReportStatus.RESOLVED.value),
        critical=await store.count_where(priority=ReportPriority.CRITICAL.value),
    )
