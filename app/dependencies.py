from app.database import async_session
from app.services.report_store import ReportStore
from app.services.triage_client import TriageClient

_report_store = ReportStore(async_session)
_triage_client: TriageClient | None = None


def get_report_store() -> ReportStore:
    return _report_store


def get_triage_client() -> TriageClient:
    global _triage_client
    if _triage_client is None:
        _triage_client = TriageClient.from_settings()
    return _triage_client


async def close_triage_client() -> None:
    """Release the shared client's HTTP connection pool."""
    global _triage_client
    if _triage_client is not None:
        await _triage_client.aclose()
        _triage_client = None
