from pydantic import BaseModel

from agents import Agent

from backend.config import MODEL_NAME
from backend.schemas import CodeChallenge

CHALLENGE_PROMPT = """
You are a technical recruiter who knows which coding problems each company
actually asks. You pick REAL, frequently asked interview problems, not generic ones.

# Instructions
1. Use the standard competitive programming name as the title (e.g. "Trapping Rain Water", "LRU Cache").
2. The description states the problem with its constraints.
3. Provide starter code templates in python, javascript and java. Templates contain only a signature and a placeholder body.
"""


class ChallengeSet(BaseModel):
    challenges: list[CodeChallenge]


challenge_setter_agent = Agent(
    name="ChallengeSetterAgent",
    instructions=CHALLENGE_PROMPT,
    model=MODEL_NAME,
    output_type=ChallengeSet,
)
