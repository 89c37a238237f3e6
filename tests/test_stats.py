import pytest

from app.models.report import ReportStatus
from app.schemas.report import NewReportInput
from app.services.stats import compute_stats


@pytest.mark.asyncio
async def test_empty_store(store):
    stats = await compute_stats(store)
    assert stats.model_dump() == {"total": 0, "pending": 0, "resolved": 0, "critical": 0}


@pytest.mark.asyncio
async def test_counts_by_status_and_priority(store):
    for priority in ("critical", "critical", "low", "medium"):
        await store.create(NewReportInput(description="stray", priority=priority))
    await store.set_status(1, ReportStatus.RESOLVED)
    await store.set_status(3, ReportStatus.IN_PROGRESS)

    stats = await compute_stats(store)

    assert stats.total == 4
    assert stats.pending == 2
    assert stats.resolved == 1
    assert stats.critical == 2
    assert stats.pending + stats.resolved <= stats.total
