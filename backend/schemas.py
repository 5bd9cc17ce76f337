# backend/schemas.py

"""
Pydantic Models for Generated Artifacts and API Requests

This module defines every data shape exchanged with the generation service and
with the HTTP clients of the application. The same models double as the
structured-output contracts handed to the generation agents, so the remote
model is constrained to return JSON that validates against them.

Wire keys keep the camelCase names used by the frontend (`correctAnswer`,
`starterCode`, ...); Python code uses the snake_case attribute names.
"""

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CompanyType(str, Enum):
    PRODUCT = "Product"
    SERVICE = "Service"
    STARTUP = "Startup"
    UNKNOWN = "Unknown"


class QuizCategory(str, Enum):
    APTITUDE = "Aptitude"
    TECHNICAL = "Technical"
    CORE_CS = "Core CS"
    DOMAIN = "Domain"


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class Language(str, Enum):
    PYTHON = "python"
    JAVASCRIPT = "javascript"
    JAVA = "java"


class ExecutionStatus(str, Enum):
    SUCCESS = "Success"
    ERROR = "Error"


class _WireModel(BaseModel):
    """Base model accepting both the camelCase wire keys and attribute names."""
    model_config = ConfigDict(populate_by_name=True)


# --- Generated artifacts ---

class JobAnalysis(_WireModel):
    """
    The result of analyzing a job description for a specific company.
    Produced once per pipeline run and read-only afterwards.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    role: str = Field(..., description="The job role, e.g. 'Backend Engineer'.")
    company: str = Field(..., description="The target company name.")
    company_type: CompanyType = Field(..., alias="companyType", description="Whether the company is product, service or startup.")
    skills: List[str] = Field(..., description="Required skills, most important first.")
    summary: str = Field(..., description="A one-sentence summary of what the role expects.")


class StudyModule(_WireModel):
    week: str = Field(..., description="Week label, e.g. 'Week 1'.")
    topic: str = Field(..., description="Main theme of the week.")
    description: str = Field(..., description="Detailed advice on what to study.")
    resources: List[str] = Field(..., description="2-3 search terms or topics to look up.")


class TrainingPlan(_WireModel):
    tech_stack: List[str] = Field(default_factory=list, alias="techStack")
    study_plan: List[StudyModule] = Field(default_factory=list, alias="studyPlan")


class QuizQuestion(_WireModel):
    id: int
    category: QuizCategory
    question: str
    options: List[str]
    correct_answer: int = Field(..., alias="correctAnswer", description="Index of the correct option.")
    explanation: str

    @model_validator(mode="after")
    def _answer_in_range(self):
        if not 0 <= self.correct_answer < len(self.options):
            raise ValueError(
                f"correctAnswer {self.correct_answer} is outside the {len(self.options)} options"
            )
        return self


class StarterCode(_WireModel):
    python: str
    javascript: str
    java: str


class CodeChallenge(_WireModel):
    title: str = Field(..., description="Standard competitive programming name, e.g. 'LRU Cache'.")
    description: str = Field(..., description="Problem statement with constraints.")
    difficulty: Difficulty
    starter_code: StarterCode = Field(..., alias="starterCode")

    def starter_for(self, language: Language) -> str:
        """Returns the starter template for one of the supported languages."""
        return getattr(self.starter_code, Language(language).value)


class TestCase(_WireModel):
    input: str
    expected_output: str = Field(..., alias="expectedOutput")
    actual_output: str = Field(..., alias="actualOutput")
    passed: bool


class ExecutionResult(_WireModel):
    """
    A simulated judge verdict. The verdicts are written by the model, not
    computed, so they are a practice aid rather than a correctness oracle.
    """
    status: ExecutionStatus
    error_details: Optional[str] = Field(None, alias="errorDetails")
    summary: str
    test_cases: List[TestCase] = Field(default_factory=list, alias="testCases")


# --- API requests ---

class AnalyzeRequest(_WireModel):
    """
    Input of the 'submit analysis' action. Either free text or a base64
    screenshot is required depending on `mode`; the company name always is.
    """
    text: str = Field("", description="The pasted job description.")
    image_base64: Optional[str] = Field(None, alias="imageBase64", description="A base64-encoded screenshot of the job description.")
    company_name: str = Field("", alias="companyName", description="The company the user is targeting.")
    mode: Literal["text", "image"] = Field("text", description="Which intake tab the user submitted from.")


class CodeRequest(_WireModel):
    code: str = Field(..., description="The user's current code.")
    language: Language = Field(Language.PYTHON, description="Language of the code.")
    challenge_index: int = Field(0, ge=0, alias="challengeIndex", description="Index of the active challenge.")
