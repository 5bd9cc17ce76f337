from pydantic import BaseModel, Field

from agents import Agent

from backend.config import MODEL_NAME
from backend.schemas import QuizCategory

QUIZ_PROMPT = """
You are an expert technical interviewer. You write multiple-choice questions
that match the placement papers and technical rounds of one specific company.

# Instructions
1. Every question has exactly 4 options.
2. "correctAnswer" is the zero-based index (0-3) of the correct option.
3. Every question comes with a short explanation of the correct answer.
4. Classify each question as "Aptitude", "Technical", "Core CS" or "Domain".
"""


class QuizQuestionDraft(BaseModel):
    """
    A question as the model writes it. The bounds of `correctAnswer` are
    checked afterwards, question by question, so one bad entry does not
    discard the whole bank.
    """
    id: int
    category: QuizCategory
    question: str
    options: list[str]
    correctAnswer: int = Field(..., description="Index of the correct option (0-3)")
    explanation: str


class QuizDraft(BaseModel):
    questions: list[QuizQuestionDraft]


quiz_writer_agent = Agent(
    name="QuizWriterAgent",
    instructions=QUIZ_PROMPT,
    model=MODEL_NAME,
    output_type=QuizDraft,
)
