from agents import Agent

from backend.config import MODEL_NAME
from backend.schemas import JobAnalysis

# The analyst reads a job description (text and/or screenshot) and returns a
# structured JobAnalysis tailored to the company the user is targeting.
ANALYST_PROMPT = """
You are an expert HR and Technical Recruiter assistant.
You read job descriptions, given as text, as a screenshot, or both, and extract
what a candidate needs to know to prepare for the interview.

# Instructions
1. Extract the job role and the required skills, most important first.
2. Always use the company name the user gives you, even if the description names another one.
3. Classify the company as "Product", "Service", "Startup" or "Unknown".
4. Write a one-sentence summary of what the role expects.
"""

job_analyst_agent = Agent(
    name="JobAnalystAgent",
    instructions=ANALYST_PROMPT,
    model=MODEL_NAME,
    output_type=JobAnalysis,
)
