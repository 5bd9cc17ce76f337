import html
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote_plus

import pandas as pd

from backend.schemas import (
    CodeChallenge,
    CompanyType,
    Difficulty,
    ExecutionResult,
    ExecutionStatus,
    JobAnalysis,
    QuizCategory,
    QuizQuestion,
    TrainingPlan,
)


@dataclass(frozen=True)
class Badge:
    icon: str
    label: str
    color: str


# Display attributes are keyed by the enums so every member must be covered.
CATEGORY_BADGES: Dict[QuizCategory, Badge] = {
    QuizCategory.APTITUDE: Badge("🧮", "Aptitude", "#7c3aed"),
    QuizCategory.TECHNICAL: Badge("💻", "Technical", "#2563eb"),
    QuizCategory.CORE_CS: Badge("🖥️", "Core CS", "#0891b2"),
    QuizCategory.DOMAIN: Badge("🎯", "Domain", "#db2777"),
}

DIFFICULTY_BADGES: Dict[Difficulty, Badge] = {
    Difficulty.EASY: Badge("🟢", "Easy", "#22c55e"),
    Difficulty.MEDIUM: Badge("🟡", "Medium", "#eab308"),
    Difficulty.HARD: Badge("🔴", "Hard", "#ef4444"),
}

COMPANY_TYPE_BADGES: Dict[CompanyType, Badge] = {
    CompanyType.PRODUCT: Badge("🚀", "Product-based", "#15803d"),
    CompanyType.SERVICE: Badge("🏢", "Service-based", "#c2410c"),
    CompanyType.STARTUP: Badge("🌱", "Startup", "#4f46e5"),
    CompanyType.UNKNOWN: Badge("❔", "General", "#475569"),
}

STUDY_PLAN_COLUMNS = ["Timeline", "Topic", "What to Study", "Search Terms"]
CATEGORY_BOARD_COLUMNS = ["Topic", "Questions"]
TEST_CASE_COLUMNS = ["Passed", "Input", "Expected", "Actual"]


# --- Dashboard & Study Plan ---

def resource_search_url(term: str) -> str:
    """Study resources are search terms; link them to a tutorial search."""
    return f"https://www.google.com/search?q={quote_plus(term + ' tutorial')}"


def render_dashboard(analysis: JobAnalysis) -> str:
    """
    Renders the analysis summary card shown above the study plan.

    Every value is user- or model-written text, so it is escaped before it
    goes into the markup.
    """
    badge = COMPANY_TYPE_BADGES[analysis.company_type]
    skills = "".join(
        f"<span style='display:inline-block; margin:2px; padding:2px 8px; background:#333333; border-radius:6px;'>{html.escape(skill)}</span>"
        for skill in analysis.skills
    )
    return f"""
    <div style='padding:10px; background:#1a1a1a; border-radius:8px; border: 1px solid #333333;'>
        <h2 style='margin:0;'>{html.escape(analysis.role)}</h2>
        <p style='margin:5px 0;'>{html.escape(analysis.summary)}</p>
        <p style='margin:5px 0;'>🏛️ <b>{html.escape(analysis.company)}</b>
            <span style='margin-left:6px; padding:1px 8px; border-radius:10px; background:{badge.color}; color:#ffffff; font-size:0.8em;'>{badge.icon} {badge.label}</span>
        </p>
        <p style='margin:5px 0 2px 0; font-size:0.85em; text-transform:uppercase;'>Key Skills Detected</p>
        <div>{skills}</div>
    </div>
    """


def render_study_plan(plan: Optional[TrainingPlan]) -> pd.DataFrame:
    """Converts the training plan into a DataFrame for the UI."""
    if not plan or not plan.study_plan:
        return pd.DataFrame(columns=STUDY_PLAN_COLUMNS)

    data = [
        [module.week, module.topic, module.description, ", ".join(module.resources)]
        for module in plan.study_plan
    ]
    return pd.DataFrame(data, columns=STUDY_PLAN_COLUMNS)


def render_study_resources(plan: Optional[TrainingPlan]) -> str:
    """Markdown list of every recommended search term, linked."""
    if not plan or not plan.study_plan:
        return "No study plan could be generated. Try analyzing the job description again."

    lines = [f"### Step-by-step roadmap to master {', '.join(plan.tech_stack[:3])}"]
    for module in plan.study_plan:
        links = " · ".join(f"[{res}]({resource_search_url(res)})" for res in module.resources)
        lines.append(f"- **{module.week}: {module.topic}** {links}")
    return "\n".join(lines)


# --- Quiz ---

def partition_quiz(questions: List[QuizQuestion]) -> Dict[QuizCategory, List[QuizQuestion]]:
    """Groups questions by category, in the fixed category order."""
    groups: Dict[QuizCategory, List[QuizQuestion]] = {category: [] for category in QuizCategory}
    for question in questions:
        groups[question.category].append(question)
    return groups


def render_category_board(questions: List[QuizQuestion]) -> pd.DataFrame:
    groups = partition_quiz(questions)
    data = [
        [f"{CATEGORY_BADGES[category].icon} {CATEGORY_BADGES[category].label}", len(group)]
        for category, group in groups.items()
    ]
    return pd.DataFrame(data, columns=CATEGORY_BOARD_COLUMNS)


@dataclass(frozen=True)
class QuizProgress:
    """Where the user is inside one category of the quiz."""
    category: QuizCategory
    index: int = 0
    score: int = 0
    answered: bool = False
    selected: Optional[int] = None


def start_category(category: QuizCategory) -> QuizProgress:
    return QuizProgress(category=QuizCategory(category))


def current_question(progress: QuizProgress, questions: List[QuizQuestion]) -> Optional[QuizQuestion]:
    """The question the progress points at, or None if the quiz no longer has it."""
    group = partition_quiz(questions)[progress.category]
    if not 0 <= progress.index < len(group):
        return None
    return group[progress.index]


def answer_question(
    progress: QuizProgress, questions: List[QuizQuestion], option_index: int
) -> Tuple[QuizProgress, bool]:
    """
    Records the answer to the current question.

    A question can only be answered once; answering again returns the progress
    unchanged. Returns the new progress and whether the answer was correct.
    If the quiz was regenerated and the question is gone, nothing is recorded.
    """
    current = current_question(progress, questions)
    if current is None:
        return progress, False
    if progress.answered:
        return progress, progress.selected == current.correct_answer

    correct = option_index == current.correct_answer
    return replace(
        progress,
        answered=True,
        selected=option_index,
        score=progress.score + (1 if correct else 0),
    ), correct


def next_question(progress: QuizProgress, questions: List[QuizQuestion]) -> QuizProgress:
    """Moves to the next question of the category; stays put on the last one."""
    total = len(partition_quiz(questions)[progress.category])
    if progress.index >= total - 1:
        return progress
    return replace(progress, index=progress.index + 1, answered=False, selected=None)


def is_last_question(progress: QuizProgress, questions: List[QuizQuestion]) -> bool:
    return progress.index >= len(partition_quiz(questions)[progress.category]) - 1


# --- Code Lab ---

def challenge_label(index: int, challenge: CodeChallenge) -> str:
    badge = DIFFICULTY_BADGES[challenge.difficulty]
    return f"{index + 1}. {badge.icon} {challenge.title} ({badge.label})"


def render_test_cases(result: Optional[ExecutionResult]) -> pd.DataFrame:
    if result is None:
        return pd.DataFrame(columns=TEST_CASE_COLUMNS)

    data = [
        ["✅" if case.passed else "❌", case.input, case.expected_output, case.actual_output]
        for case in result.test_cases
    ]
    return pd.DataFrame(data, columns=TEST_CASE_COLUMNS)


def render_execution_summary(result: ExecutionResult) -> str:
    if result.status == ExecutionStatus.ERROR:
        details = f"\n\n```\n{result.error_details}\n```" if result.error_details else ""
        return f"### ❌ Error\n\n{result.summary}{details}"

    passed = sum(1 for case in result.test_cases if case.passed)
    return (
        f"### ✅ {passed}/{len(result.test_cases)} test cases passed\n\n{result.summary}\n\n"
        "_Results are simulated by the AI judge; the code is not actually executed._"
    )
