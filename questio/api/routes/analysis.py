"""Analysis endpoints: survey -> summary, contact -> detailed report."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from questio.api.models import AnalysisResponse, ReportRequest, SurveyRequest
from questio.api.sessions import SessionRegistry
from questio.leads import LeadCaptureError
from questio.observability.logging import get_logger
from questio.pipeline import ConsultingSession, SessionStateError

router = APIRouter(prefix="/api", tags=["analysis"])
logger = get_logger(__name__)

LEAD_FAILURE_MESSAGE = "전송 중 오류가 발생했습니다."


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def _get_session(registry: SessionRegistry, session_id: str) -> ConsultingSession:
    session = registry.get(session_id)
    if session is None or session.result is None or session.answers is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return session


@router.post("/analysis", response_model=AnalysisResponse)
async def create_analysis(
    survey: SurveyRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> AnalysisResponse:
    """Score the catalog and generate the persona summary for a new session."""
    answers = survey.to_answers()
    session_id, session = registry.create()
    result = await session.analyze(answers)
    return AnalysisResponse.from_result(session_id, answers, result)


@router.get("/analysis/{session_id}", response_model=AnalysisResponse)
async def get_analysis(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> AnalysisResponse:
    session = _get_session(registry, session_id)
    return AnalysisResponse.from_result(session_id, session.answers, session.result)


@router.post("/analysis/{session_id}/report", response_model=AnalysisResponse)
async def create_report(
    session_id: str,
    body: ReportRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> AnalysisResponse:
    """
    Record the contact, then generate the 15-section report and persona image.

    Lead capture failure is the only user-visible error of the pipeline.
    """
    session = _get_session(registry, session_id)
    try:
        result = await session.request_report(body.email)
    except LeadCaptureError as e:
        logger.error("Report aborted, lead capture failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=LEAD_FAILURE_MESSAGE
        ) from e
    except SessionStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    return AnalysisResponse.from_result(session_id, session.answers, result)
