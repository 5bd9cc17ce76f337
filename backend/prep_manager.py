# backend/prep_manager.py

"""
Owns the application state of a preparation session and drives the pipeline.

A pipeline run goes Idle -> Analyzing -> Generating -> Ready:
- The job description is analyzed first. Every later step needs that result,
  so nothing else is issued until the analysis is back.
- The study plan, quiz and coding challenges are then generated concurrently,
  and the state only switches to Ready once all three have returned.
- Any exception escaping the generation client aborts the run, resets the
  state to Idle and reports a plain-language error.

Once Ready, the quiz and the challenges can be regenerated on their own. Each
of those slots carries a sequence number so that a response arriving after a
newer request for the same slot is dropped instead of overwriting it.

A single PrepManager is shared by the HTTP API and the Gradio UI through
`backend.dependencies`.
"""

import asyncio
import base64
import binascii
import logging
from enum import Enum
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from backend.generation import GenerationClient
from backend.schemas import (
    AnalyzeRequest,
    CodeChallenge,
    ExecutionResult,
    JobAnalysis,
    Language,
    QuizQuestion,
    TrainingPlan,
)

logger = logging.getLogger(__name__)

RUN_FAILED_MESSAGE = "Something went wrong during analysis. Please try again."

QUIZ_SLOT = "quiz"
CHALLENGES_SLOT = "challenges"


# --- Errors ---

class PrepError(Exception):
    """Base class for errors whose message can be shown to the user as is."""


class SubmissionError(PrepError):
    """The submitted form is incomplete; nothing was sent to the generation service."""


class PipelineBusyError(PrepError):
    """A pipeline run is already in flight."""


class PipelineNotReadyError(PrepError):
    """The action needs a finished analysis."""


class PipelineRunError(PrepError):
    """A pipeline run failed and the state was reset to Idle."""


# --- State ---

class PipelineStatus(str, Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    GENERATING = "generating"
    READY = "ready"


class PrepState(BaseModel):
    """Everything the views may read. Replaced, never edited, by the manager."""
    status: PipelineStatus = PipelineStatus.IDLE
    analysis: Optional[JobAnalysis] = None
    training_plan: Optional[TrainingPlan] = Field(None, alias="trainingPlan")
    quiz: List[QuizQuestion] = Field(default_factory=list)
    challenges: List[CodeChallenge] = Field(default_factory=list)
    error: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


def validate_submission(request: AnalyzeRequest) -> Optional[bytes]:
    """
    Checks the intake form and decodes the screenshot, if any.

    Raises:
        SubmissionError: with the inline message to show next to the form.
    """
    if not request.company_name.strip():
        raise SubmissionError("Please enter a target company name.")

    if request.mode == "text":
        if not request.text.strip():
            raise SubmissionError("Please paste the job description text.")
        return None

    if not request.image_base64:
        raise SubmissionError("Please upload a job description image.")
    data = request.image_base64
    # Accept data URLs as produced by browsers ("data:image/png;base64,...").
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise SubmissionError("The uploaded image could not be read. Please upload it again.")


class PrepManager:
    """
    Manages the preparation session: the pipeline state machine, the generated
    artifacts and the per-artifact regeneration hooks.
    """
    def __init__(self, client: Optional[GenerationClient] = None):
        self.client = client or GenerationClient()
        self.state = PrepState()
        self._sequence: Dict[str, int] = {QUIZ_SLOT: 0, CHALLENGES_SLOT: 0}

    @property
    def is_running(self) -> bool:
        return self.state.status in (PipelineStatus.ANALYZING, PipelineStatus.GENERATING)

    @property
    def is_ready(self) -> bool:
        return self.state.status == PipelineStatus.READY

    def reset(self) -> PrepState:
        """Forgets the current session and returns to Idle."""
        if self.is_running:
            raise PipelineBusyError("Please wait for the current analysis to finish.")
        self._bump(QUIZ_SLOT)
        self._bump(CHALLENGES_SLOT)
        self.state = PrepState()
        return self.state

    async def stream_analysis(
        self, request: AnalyzeRequest
    ) -> AsyncGenerator[Tuple[str, Any], None]:
        """
        Runs the full pipeline, yielding progress events along the way.

        Events are `(event_type, payload)` tuples of type 'status', 'analysis',
        'ready' or 'error'. The generated artifacts are only published with the
        'ready' event, once every generation call has returned.

        Raises:
            SubmissionError: if the form is incomplete. Raised before any call is made.
            PipelineBusyError: if another run is in flight.
        """
        image_bytes = validate_submission(request)
        if self.is_running:
            raise PipelineBusyError("An analysis is already in progress.")

        # Responses to refreshes issued before this run must not land on its results.
        self._bump(QUIZ_SLOT)
        self._bump(CHALLENGES_SLOT)
        company = request.company_name.strip()
        self.state = PrepState(status=PipelineStatus.ANALYZING)

        try:
            yield "status", f"Analyzing the job description for {company}..."
            try:
                analysis = await self.client.analyze(request.text, image_bytes, company)
                self.state = self.state.model_copy(update={"status": PipelineStatus.GENERATING})
                yield "analysis", analysis.model_dump(mode="json", by_alias=True)
                yield "status", "Generating your study plan, quiz and coding challenges..."

                plan_modules, quiz, challenges = await asyncio.gather(
                    self.client.generate_study_plan(analysis),
                    self.client.generate_quiz(analysis),
                    self.client.generate_code_challenges(analysis),
                )
            except Exception:
                logger.exception("Pipeline run for %s failed.", company)
                self.state = PrepState(error=RUN_FAILED_MESSAGE)
            else:
                self.state = PrepState(
                    status=PipelineStatus.READY,
                    analysis=analysis,
                    training_plan=TrainingPlan(tech_stack=list(analysis.skills), study_plan=plan_modules),
                    quiz=quiz,
                    challenges=challenges,
                )
                logger.info(
                    "Pipeline ready for %s: %d modules, %d questions, %d challenges.",
                    company, len(plan_modules), len(quiz), len(challenges),
                )
        finally:
            # The consumer went away mid-run (closed stream, cancelled task).
            if self.is_running:
                logger.warning("Pipeline run for %s was interrupted.", company)
                self.state = PrepState(error=RUN_FAILED_MESSAGE)

        if self.is_ready:
            yield "ready", self.state.model_dump(mode="json", by_alias=True)
        else:
            yield "error", self.state.error

    async def submit(self, request: AnalyzeRequest) -> PrepState:
        """
        Runs the full pipeline to completion and returns the resulting state.

        Raises:
            SubmissionError, PipelineBusyError: see `stream_analysis`.
            PipelineRunError: if the run failed and the state went back to Idle.
        """
        async for event_type, payload in self.stream_analysis(request):
            if event_type == "error":
                raise PipelineRunError(payload)
        return self.state

    async def refresh_quiz(self) -> List[QuizQuestion]:
        """
        Regenerates the quiz for the current analysis.

        Raises:
            PipelineNotReadyError: before an analysis, or if the session was
                reset or restarted while the quiz was being generated.
        """
        analysis = self._require_analysis()
        seq = self._bump(QUIZ_SLOT)
        quiz = await self.client.generate_quiz(analysis)
        if self._is_current(QUIZ_SLOT, seq):
            self.state = self.state.model_copy(update={"quiz": quiz})
        else:
            self._drop_stale(QUIZ_SLOT, seq)
        return self.state.quiz

    async def refresh_challenges(self) -> List[CodeChallenge]:
        """Regenerates the coding challenges for the current analysis. Raises like `refresh_quiz`."""
        analysis = self._require_analysis()
        seq = self._bump(CHALLENGES_SLOT)
        challenges = await self.client.generate_code_challenges(analysis)
        if self._is_current(CHALLENGES_SLOT, seq):
            self.state = self.state.model_copy(update={"challenges": challenges})
        else:
            self._drop_stale(CHALLENGES_SLOT, seq)
        return self.state.challenges

    async def run_code(self, code: str, language: Language, challenge_index: int) -> ExecutionResult:
        """Submits code for the selected challenge to the simulated judge."""
        challenge = self.get_challenge(challenge_index)
        return await self.client.execute(code, language, challenge.description)

    async def get_hint(self, code: str, language: Language, challenge_index: int) -> str:
        challenge = self.get_challenge(challenge_index)
        return await self.client.get_hint(code, language, challenge.description)

    def get_challenge(self, challenge_index: int) -> CodeChallenge:
        self._require_analysis()
        if not 0 <= challenge_index < len(self.state.challenges):
            raise IndexError(f"Challenge index {challenge_index} is out of bounds.")
        return self.state.challenges[challenge_index]

    def _require_analysis(self) -> JobAnalysis:
        if not self.is_ready or self.state.analysis is None:
            raise PipelineNotReadyError("Please analyze a job description first.")
        return self.state.analysis

    def _bump(self, slot: str) -> int:
        self._sequence[slot] += 1
        return self._sequence[slot]

    def _is_current(self, slot: str, seq: int) -> bool:
        return self._sequence[slot] == seq

    def _drop_stale(self, slot: str, seq: int) -> None:
        logger.info("Dropping stale %s response #%d.", slot, seq)
        if not self.is_ready:
            # The session this response belonged to is gone.
            raise PipelineNotReadyError("The session changed while regenerating. Please analyze a job description first.")
