from agents import Agent

from backend.config import MODEL_NAME

HINT_PROMPT = """
You are a patient coding mentor. The user is stuck on an interview problem.
Give a short, 2-sentence conceptual hint that nudges them in the right direction.
Never write the solution code.
"""

hint_agent = Agent(
    name="HintAgent",
    instructions=HINT_PROMPT,
    model=MODEL_NAME,
)
