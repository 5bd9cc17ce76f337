# backend/generation.py

"""
Generation client for every artifact the application shows.

Each public coroutine performs exactly one generation task: it builds the
prompt, runs the matching agent from `backend.local_agents` (the agent's
`output_type` makes the SDK attach a strict JSON schema to the request),
re-validates whatever comes back, and substitutes a fixed fallback value when
anything goes wrong. None of them raise; callers always receive a value of
the declared shape.
"""

import base64
import logging
from typing import Any, List, Optional, Type, TypeVar

from agents import Runner
from pydantic import BaseModel, ValidationError

from backend.local_agents.challenge_setter import ChallengeSet, challenge_setter_agent
from backend.local_agents.code_judge import code_judge_agent
from backend.local_agents.hint_giver import hint_agent
from backend.local_agents.job_analyst import job_analyst_agent
from backend.local_agents.quiz_writer import QuizDraft, quiz_writer_agent
from backend.local_agents.study_planner import StudyPlanDraft, study_planner_agent
from backend.schemas import (
    CodeChallenge,
    CompanyType,
    Difficulty,
    ExecutionResult,
    ExecutionStatus,
    JobAnalysis,
    Language,
    QuizCategory,
    QuizQuestion,
    StarterCode,
    StudyModule,
)

logger = logging.getLogger(__name__)

# --- Constants ---

STUDY_PLAN_WEEKS = 4
QUESTIONS_PER_CATEGORY = 10
CHALLENGE_COUNT = 3

EMPTY_HINT = "Try breaking the problem into smaller steps."
FALLBACK_HINT = "Analyze the constraints and edge cases carefully."

# Interview style the quiz prompt asks for, per company type.
COMPANY_QUIZ_STYLE = {
    CompanyType.SERVICE: (
        "Focus heavily on Quantitative Aptitude, Logical Reasoning, and basic C/Java/Python "
        "output-prediction questions (pointer logic, loops)."
    ),
    CompanyType.PRODUCT: (
        "Focus on Data Structures (trees, graphs), Algorithms, Operating Systems "
        "(deadlocks, paging), and DBMS (SQL queries, normalization)."
    ),
    CompanyType.STARTUP: (
        "Balance practical coding and debugging questions with system design basics "
        "and the frameworks listed in the job's skills."
    ),
    CompanyType.UNKNOWN: (
        "Use a balanced mix of aptitude, programming fundamentals, and core computer science."
    ),
}

ModelT = TypeVar("ModelT", bound=BaseModel)


# --- Fallbacks ---

def fallback_analysis(company_name: str = "") -> JobAnalysis:
    """The analysis shown when the job description could not be analyzed."""
    return JobAnalysis(
        role="Software Engineer",
        company=company_name or "Unknown Company",
        company_type=CompanyType.UNKNOWN,
        skills=["Problem Solving"],
        summary="Could not analyze the job description properly. Please try again.",
    )


def fallback_challenges(analysis: JobAnalysis) -> List[CodeChallenge]:
    """A single 'Two Sum' challenge, used when no challenges could be generated."""
    return [
        CodeChallenge(
            title="Two Sum",
            description=(
                "Given an array of integers nums and an integer target, return indices of the "
                f"two numbers such that they add up to target. (Often asked by {analysis.company})"
            ),
            difficulty=Difficulty.EASY,
            starter_code=StarterCode(
                python="def two_sum(nums, target):\n    # Write your code here\n    pass",
                javascript="function twoSum(nums, target) {\n    // Write your code here\n}",
                java=(
                    "class Solution {\n"
                    "    public int[] twoSum(int[] nums, int target) {\n"
                    "        // Write your code here\n"
                    "        return new int[]{};\n"
                    "    }\n"
                    "}"
                ),
            ),
        )
    ]


def fallback_execution() -> ExecutionResult:
    return ExecutionResult(
        status=ExecutionStatus.ERROR,
        error_details="Failed to execute code simulation.",
        summary="System error occurred.",
        test_cases=[],
    )


# --- Client ---

class GenerationClient:
    """
    Stateless wrapper around the generation agents.

    One coroutine per generation task. Every coroutine may suspend on network
    I/O and none of them raise.
    """

    async def analyze(
        self, text: str, image_bytes: Optional[bytes] = None, company_name: str = ""
    ) -> JobAnalysis:
        """
        Analyzes a job description given as text, a screenshot, or both.

        The screenshot, if any, travels as an inline image next to the prompt.
        The returned company is always the one the user asked for.
        """
        try:
            prompt = _build_analysis_prompt(text, company_name)
            result = await Runner.run(job_analyst_agent, _with_image(prompt, image_bytes))
            analysis = _coerce(result.final_output, JobAnalysis)
            if company_name:
                analysis = analysis.model_copy(update={"company": company_name})
            return analysis
        except Exception as e:
            logger.warning("Error analyzing job description: %s. Using fallback analysis.", e)
            return fallback_analysis(company_name)

    async def generate_study_plan(self, analysis: JobAnalysis) -> List[StudyModule]:
        """Generates the weekly study modules. Returns [] if generation fails."""
        try:
            result = await Runner.run(study_planner_agent, _build_study_plan_prompt(analysis))
            draft = _coerce(result.final_output, StudyPlanDraft)
            return list(draft.modules)
        except Exception as e:
            logger.warning("Error generating study plan: %s. Using an empty plan.", e)
            return []

    async def generate_quiz(self, analysis: JobAnalysis) -> List[QuizQuestion]:
        """
        Generates the quiz bank for the analyzed job.

        Questions whose correct answer does not point into their options are
        dropped, and ids are renumbered from 1. Returns [] if generation fails.
        """
        try:
            result = await Runner.run(quiz_writer_agent, _build_quiz_prompt(analysis))
            draft = _coerce(result.final_output, QuizDraft)
        except Exception as e:
            logger.warning("Error generating quiz: %s. Using an empty quiz.", e)
            return []

        questions = []
        for raw in draft.questions:
            try:
                question = QuizQuestion.model_validate(raw.model_dump())
            except ValidationError as e:
                logger.info("Dropping malformed quiz question %s: %s", raw.id, e.errors()[0]["msg"])
                continue
            questions.append(question.model_copy(update={"id": len(questions) + 1}))
        return questions

    async def generate_code_challenges(self, analysis: JobAnalysis) -> List[CodeChallenge]:
        """
        Generates the coding challenges, easiest first.

        Returns exactly the requested number (extra entries are cut off), or the
        single 'Two Sum' fallback if nothing usable came back.
        """
        try:
            result = await Runner.run(challenge_setter_agent, _build_challenge_prompt(analysis))
            challenges = list(_coerce(result.final_output, ChallengeSet).challenges)
            if not challenges:
                raise ValueError("No challenge generated.")
            if len(challenges) > CHALLENGE_COUNT:
                logger.info("Received %d challenges, keeping the first %d.", len(challenges), CHALLENGE_COUNT)
            return challenges[:CHALLENGE_COUNT]
        except Exception as e:
            logger.warning("Error generating code challenges: %s. Using fallback challenge.", e)
            return fallback_challenges(analysis)

    async def execute(self, code: str, language: Language, problem_description: str) -> ExecutionResult:
        """
        Asks the judge agent to simulate compiling and testing the code.

        Nothing runs: test cases and verdicts are invented by the model, so two
        runs of the same code can disagree.
        """
        try:
            prompt = _build_execution_prompt(code, language, problem_description)
            result = await Runner.run(code_judge_agent, prompt)
            return _coerce(result.final_output, ExecutionResult)
        except Exception as e:
            logger.warning("Error simulating code execution: %s. Using fallback result.", e)
            return fallback_execution()

    async def get_hint(self, code: str, language: Language, problem_description: str) -> str:
        try:
            prompt = _build_hint_prompt(code, language, problem_description)
            result = await Runner.run(hint_agent, prompt)
            hint = str(result.final_output or "").strip()
            return hint or EMPTY_HINT
        except Exception as e:
            logger.warning("Error generating hint: %s. Using fallback hint.", e)
            return FALLBACK_HINT


# --- Helpers ---

def _coerce(output: Any, model: Type[ModelT]) -> ModelT:
    """Validates an agent's final output, whether already parsed or raw JSON."""
    if isinstance(output, model):
        return output
    if output is None:
        raise ValueError("AI response content is empty.")
    if isinstance(output, (str, bytes)):
        return model.model_validate_json(output)
    if isinstance(output, BaseModel):
        output = output.model_dump(by_alias=True)
    return model.model_validate(output)


def _image_mime_type(image_bytes: bytes) -> str:
    if image_bytes.startswith(b"\x89PNG"):
        return "image/png"
    if image_bytes.startswith(b"GIF8"):
        return "image/gif"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def _with_image(prompt: str, image_bytes: Optional[bytes]) -> Any:
    """Wraps a prompt into a user message carrying the image inline, if any."""
    if not image_bytes:
        return prompt
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return [
        {
            "role": "user",
            "content": [
                {"type": "input_text", "text": prompt},
                {
                    "type": "input_image",
                    "image_url": f"data:{_image_mime_type(image_bytes)};base64,{encoded}",
                    "detail": "auto",
                },
            ],
        }
    ]


def _build_analysis_prompt(text: str, company_name: str) -> str:
    prompt = f"""
    Analyze the following Job Description (JD) text or image.
    CRITICAL: The user is specifically targeting the company: "{company_name}".
    Even if the JD text is generic, tailor the Role, Type, and Skills analysis specifically for "{company_name}".

    Extract the Job Role, Company Name (use "{company_name}"), and Required Skills.
    Determine if "{company_name}" is likely a "Product", "Service", or "Startup" company ("Unknown" if you cannot tell).
    Provide a brief 1-sentence summary of the expectation.
    """
    if text and text.strip():
        prompt += f"\n\nJD Text:\n{text.strip()}"
    return prompt


def _build_study_plan_prompt(analysis: JobAnalysis) -> str:
    return f"""
    Create a comprehensive {STUDY_PLAN_WEEKS}-week study plan for a {analysis.role} position at {analysis.company} ({analysis.company_type.value} company).
    The plan must be highly specific to the company's interview patterns (e.g. if Amazon, focus on Leadership Principles and DSA; if TCS, focus on Aptitude).
    Focus on these skills: {', '.join(analysis.skills)}.

    Output exactly {STUDY_PLAN_WEEKS} modules (one per week).
    """


def _build_quiz_prompt(analysis: JobAnalysis) -> str:
    categories = "\n".join(f'    - "{c.value}"' for c in QuizCategory)
    return f"""
    Generate {QUESTIONS_PER_CATEGORY * len(QuizCategory)} multiple-choice questions that have historically appeared in {analysis.company}'s placement papers or technical rounds.
    The questions must match the specific difficulty and style of {analysis.company}, a {analysis.company_type.value} company.
    {COMPANY_QUIZ_STYLE[analysis.company_type]}

    Classify each question into one of:
{categories}
    "Aptitude" is quant and logic, "Technical" is code output prediction, debugging and language specifics,
    "Core CS" is OS, DBMS and networks, "Domain" is specific to the role: {', '.join(analysis.skills)}.

    Distribution: {QUESTIONS_PER_CATEGORY} questions per category.
    """


def _build_challenge_prompt(analysis: JobAnalysis) -> str:
    return f"""
    Identify {CHALLENGE_COUNT} REAL coding interview questions that have been frequently asked in {analysis.company}'s previous interview rounds
    for a {analysis.role} position. Look for questions tagged with "{analysis.company}" on platforms like LeetCode or GeeksForGeeks.

    1. Problem 1: Easy/Medium (commonly asked in screening)
    2. Problem 2: Medium (commonly asked in technical rounds)
    3. Problem 3: Hard (asked in final rounds or for higher roles)

    In the description, explicitly mention: "This question has appeared in {analysis.company} interviews."
    """


def _build_execution_prompt(code: str, language: Language, problem_description: str) -> str:
    return f"""
    Language: {Language(language).value}.
    Problem: {problem_description}

    User Code:
    {code}
    """


def _build_hint_prompt(code: str, language: Language, problem_description: str) -> str:
    return f"""
    Problem: {problem_description}
    Current User Code ({Language(language).value}):
    {code}
    """
