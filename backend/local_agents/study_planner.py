from pydantic import BaseModel

from agents import Agent

from backend.config import MODEL_NAME
from backend.schemas import StudyModule

PLANNER_PROMPT = """
You are an expert interview preparation coach. You write week-by-week study
plans that follow the interview patterns of one specific company.

# Instructions
1. Output exactly one module per week.
2. Each module has a week label ("Week 1", "Week 2", ...), a topic, a detailed description of what to study, and 2-3 resources.
3. Resources are search terms or topics to look up (e.g. "React Hooks Tutorial", "Neetcode 150"), never URLs.
"""


class StudyPlanDraft(BaseModel):
    modules: list[StudyModule]
    """The weekly modules, in order."""


study_planner_agent = Agent(
    name="StudyPlannerAgent",
    instructions=PLANNER_PROMPT,
    model=MODEL_NAME,
    output_type=StudyPlanDraft,
)
