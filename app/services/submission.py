"""Per-submission state machine: select image, analyze, submit.

A ``Submission`` lives for one report. Failures move back to the state the
caller was in so the same step can be retried; ``submitted`` is terminal.
"""
import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Protocol

from app.models.report import ReportPriority
from app.schemas.report import NewReportInput
from app.schemas.triage import AnalysisResult
from app.utils.exceptions import InvalidTransition, PersistenceError, TriageUnavailable, ValidationError

logger = logging.getLogger(__name__)


class SubmissionState(str, enum.Enum):
    IDLE = "idle"
    IMAGE_SELECTED = "image_selected"
    ANALYZING = "analyzing"
    ANALYSIS_COMPLETE = "analysis_complete"
    ANALYSIS_FAILED = "analysis_failed"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    SUBMISSION_FAILED = "submission_failed"


class Triage(Protocol):
    async def classify(self, image: str) -> AnalysisResult: ...

    async def guidance(self, condition: str) -> str: ...


class Store(Protocol):
    async def create(self, payload: NewReportInput) -> int: ...


@dataclass
class Location:
    latitude: float | None = None
    longitude: float | None = None
    city: str | None = None
    state: str | None = None


@dataclass
class SubmissionOutcome:
    report_id: int
    priority: str
    analysis: AnalysisResult | None
    guidance: str | None


class Submission:
    def __init__(self, triage: Triage, store: Store | None = None):
        # store may be omitted for analyze-only use; submit() then refuses
        self._triage = triage
        self._store = store
        self._pending_create: asyncio.Future | None = None
        self.state = SubmissionState.IDLE
        self.history: list[SubmissionState] = [SubmissionState.IDLE]
        self.image: str | None = None
        self.analysis: AnalysisResult | None = None
        self.guidance: str | None = None
        self.report_id: int | None = None
        self.last_error: Exception | None = None

    def _move(self, state: SubmissionState) -> None:
        logger.debug("Submission %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def _require(self, *allowed: SubmissionState) -> None:
        if self.state not in allowed:
            raise InvalidTransition(f"Cannot do this while submission is {self.state.value}")

    def select_image(self, image: str | None) -> None:
        self._require(
            SubmissionState.IDLE,
            SubmissionState.IMAGE_SELECTED,
            SubmissionState.ANALYSIS_COMPLETE,
        )
        if not image or not image.strip():
            raise ValidationError("An image is required")
        self.image = image
        self.analysis = None
        self.guidance = None
        self._move(SubmissionState.IMAGE_SELECTED)

    def _analysis_failed(self, error: Exception) -> None:
        self.last_error = error
        self._move(SubmissionState.ANALYSIS_FAILED)
        self._move(SubmissionState.IMAGE_SELECTED)

    async def analyze(self) -> AnalysisResult:
        self._require(SubmissionState.IMAGE_SELECTED)
        self._move(SubmissionState.ANALYZING)
        try:
            analysis = await self._triage.classify(self.image)
        except TriageUnavailable as e:
            logger.warning("Classification unavailable: %s", e.message)
            self._analysis_failed(e)
            raise
        except Exception as e:
            logger.exception("Classification failed unexpectedly")
            self._analysis_failed(e)
            raise
        except asyncio.CancelledError:
            # nothing has been written yet, so abandoning is side-effect free
            self._move(SubmissionState.IMAGE_SELECTED)
            raise

        try:
            guidance = await self._triage.guidance(analysis.condition)
        except TriageUnavailable as e:
            logger.warning("Guidance unavailable, continuing without it: %s", e.message)
            guidance = None
        except Exception as e:
            logger.exception("Guidance failed unexpectedly")
            self._analysis_failed(e)
            raise
        except asyncio.CancelledError:
            self._move(SubmissionState.IMAGE_SELECTED)
            raise

        self.analysis = analysis
        self.guidance = guidance
        self._move(SubmissionState.ANALYSIS_COMPLETE)
        return analysis

    def build_report(self, description: str | None, location: Location | None = None) -> NewReportInput:
        if not self.image or not self.image.strip():
            raise ValidationError("An image is required")
        if not description or not description.strip():
            raise ValidationError("A description is required")

        location = location or Location()
        if self.analysis is not None:
            priority = self.analysis.severity.lower()
            ai_analysis = self.analysis.to_json()
        else:
            priority = ReportPriority.MEDIUM.value
            ai_analysis = None

        return NewReportInput(
            image_url=self.image,
            description=description.strip(),
            location_lat=location.latitude,
            location_lng=location.longitude,
            city=location.city,
            state=location.state,
            priority=priority,
            ai_analysis=ai_analysis,
        )

    async def submit(self, description: str | None, location: Location | None = None) -> int:
        self._require(SubmissionState.IMAGE_SELECTED, SubmissionState.ANALYSIS_COMPLETE)
        if self._store is None:
            raise InvalidTransition("Submission has no report store to submit to")
        payload = self.build_report(description, location)

        prior = self.state
        self._move(SubmissionState.SUBMITTING)
        # once issued, create either lands as a unit or fails as a unit; a retry
        # after cancellation collects the create that is still in flight
        if self._pending_create is None:
            self._pending_create = asyncio.ensure_future(self._store.create(payload))
        try:
            report_id = await asyncio.shield(self._pending_create)
        except asyncio.CancelledError:
            if self._pending_create.cancelled():
                self._pending_create = None
            self._move(prior)
            raise
        except Exception as e:
            self._pending_create = None
            if not isinstance(e, PersistenceError):
                logger.exception("Report creation failed unexpectedly")
            self.last_error = e
            self._move(SubmissionState.SUBMISSION_FAILED)
            self._move(prior)
            raise

        self._pending_create = None
        self.report_id = report_id
        self._move(SubmissionState.SUBMITTED)
        logger.info("Submission stored as report %s (priority=%s)", report_id, payload.priority)
        return report_id


async def run_submission(
    triage: Triage,
    store: Store,
    *,
    image: str | None,
    description: str | None,
    location: Location | None = None,
) -> SubmissionOutcome:
    """Validate, classify (degrading on failure), then persist one report."""
    if not image or not image.strip():
        raise ValidationError("An image is required")
    if not description or not description.strip():
        raise ValidationError("A description is required")

    submission = Submission(triage, store)
    submission.select_image(image)
    try:
        await submission.analyze()
    except TriageUnavailable:
        logger.info("Submitting without AI analysis")

    report_id = await submission.submit(description, location)
    return SubmissionOutcome(
        report_id=report_id,
        priority=ReportPriority.MEDIUM.value if submission.analysis is None else submission.analysis.severity,
        analysis=submission.analysis,
        guidance=submission.guidance,
    )
