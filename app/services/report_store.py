import logging
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.report import Report, ReportStatus
from app.schemas.report import NewReportInput
from app.utils.exceptions import PersistenceError, ReportNotFound

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class ReportStore:
    """Durable collection of reports backed by the shared session factory.

    Each call opens its own session, so a single ``create`` is the only unit of
    atomicity; no multi-statement transaction spans calls.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def create(self, payload: NewReportInput) -> int:
        report = Report(
            image_url=payload.image_url,
            description=payload.description,
            location_lat=payload.location_lat,
            location_lng=payload.location_lng,
            city=payload.city,
            state=payload.state,
            status=ReportStatus.PENDING.value,
            priority=payload.priority,
            ai_analysis=payload.ai_analysis,
            created_at=_utc_now(),
        )
        try:
            async with self._session_factory() as session:
                session.add(report)
                await session.commit()
                report_id = report.id
        except SQLAlchemyError as e:
            logger.exception("Failed to persist report")
            raise PersistenceError("Could not save report") from e

        logger.info("Report %s created with priority=%s", report_id, payload.priority)
        return report_id

    async def list_all(self) -> list[Report]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(Report).order_by(Report.created_at.desc(), Report.id.desc())
                )
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.exception("Failed to list reports")
            raise PersistenceError("Could not load reports") from e

    async def count_where(self, status: str | None = None, priority: str | None = None) -> int:
        query = select(func.count(Report.id))
        if status is not None:
            query = query.where(Report.status == status)
        if priority is not None:
            query = query.where(Report.priority == priority)
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                return int(result.scalar_one())
        except SQLAlchemyError as e:
            logger.exception("Failed to count reports")
            raise PersistenceError("Could not count reports") from e

    async def set_status(self, report_id: int, status: ReportStatus) -> Report:
        """Responder transition; the only mutation allowed after insert."""
        try:
            async with self._session_factory() as session:
                report = await session.get(Report, report_id)
                if report is None:
                    raise ReportNotFound(report_id)
                report.status = ReportStatus(status).value
                await session.commit()
                await session.refresh(report)
                return report
        except SQLAlchemyError as e:
            logger.exception("Failed to update status of report %s", report_id)
            raise PersistenceError("Could not update report") from e
