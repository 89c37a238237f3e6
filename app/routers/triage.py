from fastapi import APIRouter, Depends

from app.dependencies import get_report_store, get_triage_client
from app.schemas.triage import AnalyzeRequest, AnalyzeResponse, SubmissionRequest
from app.services.report_store import ReportStore
from app.services.submission import Location, Submission, run_submission
from app.services.triage_client import TriageClient
from app.utils.response import success_response

router = APIRouter(tags=["triage"])


@router.post("/analyze")
async def analyze_image(
    payload: AnalyzeRequest,
    triage: TriageClient = Depends(get_triage_client),
):
    submission = Submission(triage)
    submission.select_image(payload.image)
    analysis = await submission.analyze()
    data = AnalyzeResponse(analysis=analysis, guidance=submission.guidance)
    return success_response(data=data.model_dump(by_alias=True))


@router.post("/submissions", status_code=201)
async def create_submission(
    payload: SubmissionRequest,
    triage: TriageClient = Depends(get_triage_client),
    store: ReportStore = Depends(get_report_store),
):
    outcome = await run_submission(
        triage,
        store,
        image=payload.image,
        description=payload.description,
        location=Location(
            latitude=payload.location_lat,
            longitude=payload.location_lng,
            city=payload.city,
            state=payload.state,
        ),
    )
    return success_response(data={
        "id": outcome.report_id,
        "priority": outcome.priority,
        "analysis": outcome.analysis.model_dump(by_alias=True) if outcome.analysis else None,
        "guidance": outcome.guidance,
    })
