from agents import Agent

from backend.config import MODEL_NAME
from backend.schemas import ExecutionResult

# Nothing is executed: the judge reads the code and predicts what a compiler
# and a test harness would report.
JUDGE_PROMPT = """
Act as an automated code judge and compiler.

# Instructions
1. Check the user's code for syntax errors. If there are any, return status "Error" and describe them in errorDetails.
2. Create 3 distinct test cases for the problem, including one edge case.
3. Simulate the execution of the user's code against these test cases and report the actual output of each.
4. Summarize the verdict in one sentence.
"""

code_judge_agent = Agent(
    name="CodeJudgeAgent",
    instructions=JUDGE_PROMPT,
    model=MODEL_NAME,
    output_type=ExecutionResult,
)
