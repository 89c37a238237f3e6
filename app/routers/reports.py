from fastapi import APIRouter, Depends

from app.dependencies import get_report_store
from app.schemas.report import NewReportInput, ReportCreated, ReportResponse, StatusUpdate
from app.services.report_store import ReportStore
from app.utils.response import success_response

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=list[ReportResponse])
async def list_reports(store: ReportStore = Depends(get_report_store)):
    reports = await store.list_all()
    return [ReportResponse.model_validate(r) for r in reports]


@router.post("", response_model=ReportCreated)
async def submit_report(payload: NewReportInput, store: ReportStore = Depends(get_report_store)):
    report_id = await store.create(payload)
    return ReportCreated(id=report_id)


@router.patch("/{report_id}/status")
async def update_report_status(
    report_id: int,
    payload: StatusUpdate,
    store: ReportStore = Depends(get_report_store),
):
    report = await store.set_status(report_id, payload.status)
    return success_response(data=ReportResponse.model_validate(report).model_dump())
