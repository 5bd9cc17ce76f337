# backend/routers/prep_router.py

"""
API router for the preparation pipeline of SkillBridge Prep.

This router provides endpoints for analyzing a job description (streamed as
Server-Sent Events), reading the generated artifacts, regenerating the quiz or
the coding challenges, and using the simulated code judge.
"""

import json
import logging
from typing import Any, AsyncGenerator, Dict

from fastapi import APIRouter, Depends, HTTPException
from sse_starlette.sse import EventSourceResponse

from backend.config import api_key_configured
from backend.dependencies import get_prep_manager
from backend.prep_manager import (
    PipelineBusyError,
    PipelineNotReadyError,
    PipelineStatus,
    PrepError,
    PrepManager,
    SubmissionError,
    validate_submission,
)
from backend.schemas import AnalyzeRequest, CodeRequest

logger = logging.getLogger(__name__)

# Create an API router for pipeline-related endpoints.
router = APIRouter()


def _to_http_error(error: PrepError) -> HTTPException:
    """Maps a pipeline error to an HTTP error carrying its user-facing message."""
    if isinstance(error, SubmissionError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, (PipelineBusyError, PipelineNotReadyError)):
        return HTTPException(status_code=409, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


async def _sse_events(manager: PrepManager, req: AnalyzeRequest) -> AsyncGenerator[Dict[str, Any], None]:
    """Formats pipeline events as Server-Sent Events."""
    try:
        async for event_type, payload in manager.stream_analysis(req):
            yield {"event": event_type, "data": json.dumps(payload)}
    except PrepError as e:
        # Lost the race against another submission after the pre-checks passed.
        yield {"event": "error", "data": json.dumps(str(e))}


@router.get("/health", summary="Report Service Health")
def health():
    return {"status": "ok", "api_key_configured": api_key_configured()}


@router.post("/analyze", summary="Analyze a Job Description and Generate Prep Material")
async def analyze(req: AnalyzeRequest, manager: PrepManager = Depends(get_prep_manager)):
    """
    Runs the full pipeline for a job description and target company.

    The progress is streamed back to the client using Server-Sent Events. The
    generated artifacts arrive in a single 'ready' event once every generation
    call has returned; a failed run ends with an 'error' event instead.

    Raises:
        HTTPException: 400 if the form is incomplete, 409 if a run is in progress.
    """
    try:
        validate_submission(req)
    except SubmissionError as e:
        raise _to_http_error(e)
    if manager.is_running:
        raise HTTPException(status_code=409, detail="An analysis is already in progress.")

    return EventSourceResponse(_sse_events(manager, req))


@router.get("/state", summary="Get the Current Preparation State")
def get_state(manager: PrepManager = Depends(get_prep_manager)):
    """
    Retrieves the analysis and every generated artifact.

    Raises:
        HTTPException: 404 if no job description has been analyzed yet.
    """
    if manager.state.status == PipelineStatus.IDLE:
        raise HTTPException(status_code=404, detail="No analysis yet. Please analyze a job description first.")
    return manager.state.model_dump(mode="json", by_alias=True)


@router.post("/quiz/refresh", summary="Regenerate the Quiz")
async def refresh_quiz(manager: PrepManager = Depends(get_prep_manager)):
    try:
        quiz = await manager.refresh_quiz()
    except PrepError as e:
        raise _to_http_error(e)
    return {"quiz": [q.model_dump(mode="json", by_alias=True) for q in quiz]}


@router.post("/challenges/refresh", summary="Regenerate the Coding Challenges")
async def refresh_challenges(manager: PrepManager = Depends(get_prep_manager)):
    try:
        challenges = await manager.refresh_challenges()
    except PrepError as e:
        raise _to_http_error(e)
    return {"challenges": [c.model_dump(mode="json", by_alias=True) for c in challenges]}


@router.post("/code/run", summary="Run Code Through the Simulated Judge")
async def run_code(req: CodeRequest, manager: PrepManager = Depends(get_prep_manager)):
    """
    Submits code for one of the challenges to the AI judge.

    The code is never executed: test cases and verdicts are simulated by the
    model, so they are a practice aid rather than a real judgement.

    Raises:
        HTTPException: 409 before an analysis, 400 for an unknown challenge index.
    """
    try:
        result = await manager.run_code(req.code, req.language, req.challenge_index)
    except PrepError as e:
        raise _to_http_error(e)
    except IndexError:
        raise HTTPException(status_code=400, detail="Invalid challenge index.")
    return result.model_dump(mode="json", by_alias=True)


@router.post("/code/hint", summary="Get a Hint for a Challenge")
async def get_hint(req: CodeRequest, manager: PrepManager = Depends(get_prep_manager)):
    try:
        hint = await manager.get_hint(req.code, req.language, req.challenge_index)
    except PrepError as e:
        raise _to_http_error(e)
    except IndexError:
        raise HTTPException(status_code=400, detail="Invalid challenge index.")
    return {"hint": hint}


@router.post("/reset", summary="Reset the Session")
def reset(manager: PrepManager = Depends(get_prep_manager)):
    try:
        state = manager.reset()
    except PrepError as e:
        raise _to_http_error(e)
    logger.info("Session reset.")
    return state.model_dump(mode="json", by_alias=True)
