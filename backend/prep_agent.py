from __future__ import annotations

import base64
import logging
from typing import List, Optional

import gradio as gr

from backend.dependencies import get_prep_manager
from backend.prep_logic import (
    CATEGORY_BADGES,
    QuizProgress,
    answer_question,
    challenge_label,
    current_question,
    is_last_question,
    next_question,
    partition_quiz,
    render_category_board,
    render_dashboard,
    render_execution_summary,
    render_study_plan,
    render_study_resources,
    render_test_cases,
    start_category,
)
from backend.prep_manager import (
    PipelineBusyError,
    PipelineStatus,
    PrepError,
    SubmissionError,
    validate_submission,
)
from backend.schemas import AnalyzeRequest, Language, QuizCategory, QuizQuestion

logger = logging.getLogger(__name__)

# gr.Code has no Java highlighter; Java is shown as plain text.
CODE_HIGHLIGHT = {
    Language.PYTHON: "python",
    Language.JAVASCRIPT: "javascript",
    Language.JAVA: None,
}


def file_to_base64(file_path: str) -> str:
    with open(file_path, "rb") as f:
        return base64.b64encode(f.read()).decode("utf-8")


# ============================================================
# 🔍 ANALYZER
# ============================================================

async def run_analysis(mode, text, image_path, company, progress=gr.Progress()):
    """Validates the intake form and runs the full pipeline."""
    # [intake_error, loading_msg, analyze_btn, intake_col, workspace_col, view_plan_btn]
    request = AnalyzeRequest(
        text=text or "",
        image_base64=file_to_base64(image_path) if image_path else None,
        company_name=company or "",
        mode=mode or "text",
    )
    try:
        validate_submission(request)
    except SubmissionError as e:
        yield [f"⚠️ {e}", gr.update(), gr.update(), gr.update(), gr.update(), gr.update()]
        return

    manager = get_prep_manager()
    try:
        async for event_type, payload in manager.stream_analysis(request):
            if event_type == "status":
                progress(0.5 if manager.state.status == PipelineStatus.GENERATING else 0.1, desc=payload)
                yield [
                    "", gr.update(value=f"### ⏳ {payload}", visible=True), gr.update(interactive=False),
                    gr.update(), gr.update(), gr.update(),
                ]
            elif event_type == "error":
                gr.Warning(payload)
                yield [
                    "", gr.update(visible=False), gr.update(interactive=True),
                    gr.update(visible=True), gr.update(visible=False), gr.update(visible=False),
                ]
            elif event_type == "ready":
                yield [
                    "", gr.update(visible=False), gr.update(interactive=True),
                    gr.update(visible=False), gr.update(visible=True), gr.update(visible=True),
                ]
    except PipelineBusyError as e:
        yield [f"⚠️ {e}", gr.update(), gr.update(), gr.update(), gr.update(), gr.update()]


def render_workspace(language=Language.PYTHON.value):
    """Fills every view from the manager's state once the pipeline is ready."""
    # [dashboard_html, plan_table, plan_resources, category_board, quiz_topics_col,
    #  quiz_question_col, quiz_progress] + code lab outputs
    manager = get_prep_manager()
    state = manager.state
    if not manager.is_ready:
        return [gr.update()] * 13

    return [
        render_dashboard(state.analysis),
        render_study_plan(state.training_plan),
        render_study_resources(state.training_plan),
        render_category_board(state.quiz),
        gr.update(visible=True),
        gr.update(visible=False),
        None,
    ] + _code_lab_updates(0, language)


def navigate(view: str):
    """Switches between the analyzer and the three workspace views."""
    # [intake_col, workspace_col, plan_col, quiz_col, code_col]
    if view != "analyzer" and not get_prep_manager().is_ready:
        gr.Warning("Please analyze a job description first.")
        return [gr.update()] * 5

    return [
        gr.update(visible=view == "analyzer"),
        gr.update(visible=view != "analyzer"),
        gr.update(visible=view == "plan"),
        gr.update(visible=view == "quiz"),
        gr.update(visible=view == "code"),
    ]


def show_plan_if_ready():
    """Opens the study plan after a successful run; a failed run stays on the analyzer."""
    if not get_prep_manager().is_ready:
        return [gr.update()] * 5
    return navigate("plan")


def reset_app():
    """Forgets the session and returns to an empty analyzer."""
    # [intake_col, workspace_col, view_plan_btn, intake_error, company_input, jd_text, jd_image]
    try:
        get_prep_manager().reset()
    except PrepError as e:
        gr.Warning(str(e))
        return [gr.update()] * 7
    return [
        gr.update(visible=True), gr.update(visible=False), gr.update(visible=False),
        "", "", "", None,
    ]


# ============================================================
# 🧠 QUIZ RUNNER
# ============================================================

def _question_updates(progress: Optional[QuizProgress], questions: List[QuizQuestion]):
    """[q_header, q_options, q_feedback, next_btn]"""
    if progress is None:
        return [gr.update(), gr.update(choices=[], value=None), "", gr.update(visible=False)]

    group = partition_quiz(questions)[progress.category]
    if progress.index >= len(group):
        # The quiz was regenerated underneath this progress.
        return _question_updates(None, questions)
    question = group[progress.index]
    badge = CATEGORY_BADGES[progress.category]
    header = (
        f"### {badge.icon} {badge.label} · Question {progress.index + 1} of {len(group)}\n\n"
        f"**Score:** {progress.score}/{len(group)}\n\n{question.question}"
    )
    choices = [(option, i) for i, option in enumerate(question.options)]

    if not progress.answered:
        return [header, gr.update(choices=choices, value=None, interactive=True), "", gr.update(visible=False)]

    correct = progress.selected == question.correct_answer
    verdict = "✅ Correct!" if correct else f"❌ Incorrect. The answer is: **{question.options[question.correct_answer]}**"
    feedback = f"{verdict}\n\n**Explanation:** {question.explanation}"
    if is_last_question(progress, questions):
        feedback += f"\n\n### 🏁 Topic complete! Final score: {progress.score}/{len(group)}"
    return [
        header,
        gr.update(choices=choices, value=progress.selected, interactive=False),
        feedback,
        gr.update(visible=not is_last_question(progress, questions)),
    ]


def open_category(category: str):
    """Starts a category from the topic board."""
    # [quiz_progress, quiz_topics_col, quiz_question_col, q_header, q_options, q_feedback, next_btn]
    questions = get_prep_manager().state.quiz
    if not category:
        gr.Warning("Please pick a topic first.")
        return [None, gr.update(), gr.update()] + _question_updates(None, questions)

    progress = start_category(QuizCategory(category))
    if not partition_quiz(questions)[progress.category]:
        gr.Warning(f"No {category} questions were generated. Try regenerating the quiz.")
        return [None, gr.update(), gr.update()] + _question_updates(None, questions)

    return [progress, gr.update(visible=False), gr.update(visible=True)] + _question_updates(progress, questions)


def _stale_progress_updates(questions: List[QuizQuestion]):
    """Sends the user back to the topic board after the quiz changed underneath them."""
    gr.Warning("The quiz was regenerated. Please pick a topic again.")
    return [None, gr.update(visible=True), gr.update(visible=False)] + _question_updates(None, questions)


def submit_answer(progress: Optional[QuizProgress], option_index):
    # [quiz_progress, quiz_topics_col, quiz_question_col, q_header, q_options, q_feedback, next_btn]
    questions = get_prep_manager().state.quiz
    if progress is None or option_index is None:
        return [progress] + [gr.update()] * 6
    if current_question(progress, questions) is None:
        return _stale_progress_updates(questions)
    progress, _ = answer_question(progress, questions, int(option_index))
    return [progress, gr.update(), gr.update()] + _question_updates(progress, questions)


def advance_question(progress: Optional[QuizProgress]):
    # [quiz_progress, quiz_topics_col, quiz_question_col, q_header, q_options, q_feedback, next_btn]
    questions = get_prep_manager().state.quiz
    if progress is None:
        return [progress] + [gr.update()] * 6
    if current_question(progress, questions) is None:
        return _stale_progress_updates(questions)
    progress = next_question(progress, questions)
    return [progress, gr.update(), gr.update()] + _question_updates(progress, questions)


def back_to_topics():
    # [quiz_progress, quiz_topics_col, quiz_question_col]
    return [None, gr.update(visible=True), gr.update(visible=False)]


async def regenerate_quiz():
    """Asks for a fresh quiz bank without re-running the whole pipeline."""
    # [category_board, quiz_progress, quiz_topics_col, quiz_question_col]
    try:
        quiz = await get_prep_manager().refresh_quiz()
    except PrepError as e:
        gr.Warning(str(e))
        return [gr.update()] * 4
    if not quiz:
        gr.Warning("The quiz could not be generated. Please try again.")
    return [render_category_board(quiz), None, gr.update(visible=True), gr.update(visible=False)]


# ============================================================
# 💻 CODE LAB
# ============================================================

def _code_lab_updates(challenge_index, language):
    """[challenge_dropdown, challenge_md, code_editor, hint_md, run_summary, test_cases]"""
    challenges = get_prep_manager().state.challenges
    if not challenges:
        return [gr.update(choices=[], value=None), "No challenges available.", gr.update(value=""), "", "", render_test_cases(None)]

    index = int(challenge_index) if challenge_index is not None else 0
    index = index if 0 <= index < len(challenges) else 0
    challenge = challenges[index]
    language = Language(language or Language.PYTHON.value)
    choices = [(challenge_label(i, c), i) for i, c in enumerate(challenges)]

    return [
        gr.update(choices=choices, value=index),
        f"### {challenge.title}\n\n**Difficulty:** {challenge.difficulty.value}\n\n{challenge.description}",
        gr.update(value=challenge.starter_for(language), language=CODE_HIGHLIGHT[language]),
        "",
        "",
        render_test_cases(None),
    ]


def select_challenge(challenge_index, language):
    """Typed code is discarded whenever the challenge or the language changes."""
    # [challenge_md, code_editor, hint_md, run_summary, test_cases]
    return _code_lab_updates(challenge_index, language)[1:]


async def run_code(challenge_index, language, code):
    """Sends the code to the simulated judge."""
    # [run_summary, test_cases]
    try:
        result = await get_prep_manager().run_code(code or "", Language(language), int(challenge_index or 0))
    except (PrepError, IndexError) as e:
        gr.Warning("Please pick a challenge first." if isinstance(e, IndexError) else str(e))
        return [gr.update(), gr.update()]
    return [render_execution_summary(result), render_test_cases(result)]


async def get_hint(challenge_index, language, code):
    # [hint_md]
    try:
        hint = await get_prep_manager().get_hint(code or "", Language(language), int(challenge_index or 0))
    except (PrepError, IndexError) as e:
        gr.Warning("Please pick a challenge first." if isinstance(e, IndexError) else str(e))
        return gr.update()
    return f"💡 **Hint:** {hint}"


async def regenerate_challenges(language):
    """Asks for new coding challenges without re-running the whole pipeline."""
    try:
        await get_prep_manager().refresh_challenges()
    except PrepError as e:
        gr.Warning(str(e))
        return [gr.update()] * 6
    return _code_lab_updates(0, language)
