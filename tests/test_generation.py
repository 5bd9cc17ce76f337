"""
Tests for the generation client: prompt wiring, post-validation and fallbacks.
"""
import base64

import pytest

from backend.generation import (
    CHALLENGE_COUNT,
    EMPTY_HINT,
    FALLBACK_HINT,
    GenerationClient,
    fallback_analysis,
    fallback_challenges,
    fallback_execution,
)
from backend.local_agents.challenge_setter import challenge_setter_agent
from backend.local_agents.code_judge import code_judge_agent
from backend.local_agents.job_analyst import job_analyst_agent
from backend.local_agents.quiz_writer import quiz_writer_agent
from backend.schemas import CompanyType, ExecutionStatus, Language, QuizCategory, StudyModule
from factories import agent_result, make_analysis, make_challenge


def _question(qid, correct, category="Technical", options=("A", "B", "C", "D")):
    return {
        "id": qid,
        "category": category,
        "question": f"Q{qid}",
        "options": list(options),
        "correctAnswer": correct,
        "explanation": "Explained.",
    }


# --- analyze ---

@pytest.mark.asyncio
async def test_analyze_keeps_requested_company(mock_runner):
    mock_runner.return_value = agent_result(make_analysis(company="Some Other Co"))

    result = await GenerationClient().analyze("Backend Engineer, Java, AWS", None, "Amazon")

    assert result.company == "Amazon"
    assert result.company_type in set(CompanyType)
    agent, prompt = mock_runner.call_args.args
    assert agent is job_analyst_agent
    assert isinstance(prompt, str)
    assert "Backend Engineer, Java, AWS" in prompt
    assert '"Amazon"' in prompt


@pytest.mark.asyncio
async def test_analyze_parses_raw_json_output(mock_runner):
    mock_runner.return_value = agent_result(
        '{"role": "SDE", "company": "Infosys", "companyType": "Service", '
        '"skills": ["Java"], "summary": "Entry-level developer."}'
    )

    result = await GenerationClient().analyze("SDE role", None, "Infosys")

    assert result.role == "SDE"
    assert result.company_type == CompanyType.SERVICE


@pytest.mark.asyncio
async def test_analyze_attaches_image_inline(mock_runner):
    mock_runner.return_value = agent_result(make_analysis(company="TCS"))
    png = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16

    await GenerationClient().analyze("", png, "TCS")

    _, payload = mock_runner.call_args.args
    content = payload[0]["content"]
    assert payload[0]["role"] == "user"
    assert content[0]["type"] == "input_text"
    assert content[1]["type"] == "input_image"
    image_url = content[1]["image_url"]
    assert image_url.startswith("data:image/png;base64,")
    assert base64.b64decode(image_url.split(",", 1)[1]) == png


@pytest.mark.asyncio
async def test_analyze_defaults_unknown_images_to_jpeg(mock_runner):
    mock_runner.return_value = agent_result(make_analysis())

    await GenerationClient().analyze("", b"\xff\xd8\xff\xe0rest", "Amazon")

    _, payload = mock_runner.call_args.args
    assert payload[0]["content"][1]["image_url"].startswith("data:image/jpeg;base64,")


@pytest.mark.asyncio
@pytest.mark.parametrize("failure", [
    RuntimeError("network down"),
    agent_result("not json at all"),
    agent_result(None),
    agent_result({"role": "SDE"}),
])
async def test_analyze_falls_back_on_any_failure(mock_runner, failure):
    if isinstance(failure, Exception):
        mock_runner.side_effect = failure
    else:
        mock_runner.return_value = failure

    result = await GenerationClient().analyze("Backend Engineer", None, "Amazon")

    assert result == fallback_analysis("Amazon")
    assert result.company == "Amazon"
    assert result.company_type == CompanyType.UNKNOWN
    assert result.skills == ["Problem Solving"]


@pytest.mark.asyncio
async def test_analyze_fallback_without_company(mock_runner):
    mock_runner.side_effect = RuntimeError("boom")

    result = await GenerationClient().analyze("Backend Engineer", None, "")

    assert result.company == "Unknown Company"


# --- study plan ---

@pytest.mark.asyncio
async def test_study_plan_returns_modules(mock_runner, analysis):
    modules = [
        {"week": f"Week {i}", "topic": "Graphs", "description": "BFS and DFS.", "resources": ["Neetcode 150"]}
        for i in range(1, 5)
    ]
    mock_runner.return_value = agent_result({"modules": modules})

    plan = await GenerationClient().generate_study_plan(analysis)

    assert len(plan) == 4
    assert all(isinstance(module, StudyModule) for module in plan)
    _, prompt = mock_runner.call_args.args
    assert "Java, AWS, System Design" in prompt
    assert "Product" in prompt


@pytest.mark.asyncio
async def test_study_plan_falls_back_to_empty_list(mock_runner, analysis):
    mock_runner.side_effect = TimeoutError()

    plan = await GenerationClient().generate_study_plan(analysis)

    assert plan == []


# --- quiz ---

@pytest.mark.asyncio
async def test_quiz_drops_out_of_range_answers_and_renumbers(mock_runner, analysis):
    mock_runner.return_value = agent_result({"questions": [
        _question(10, 0, "Aptitude"),
        _question(11, 7, "Technical"),
        _question(12, 3, "Core CS"),
        _question(13, -1, "Domain"),
        _question(14, 2, "Domain", options=("yes", "no")),
    ]})

    quiz = await GenerationClient().generate_quiz(analysis)

    assert [q.id for q in quiz] == [1, 2]
    assert [q.category for q in quiz] == [QuizCategory.APTITUDE, QuizCategory.CORE_CS]
    assert all(0 <= q.correct_answer < len(q.options) for q in quiz)
    assert mock_runner.call_args.args[0] is quiz_writer_agent


@pytest.mark.asyncio
async def test_quiz_falls_back_to_empty_list(mock_runner, analysis):
    mock_runner.side_effect = ValueError("schema mismatch")

    assert await GenerationClient().generate_quiz(analysis) == []


@pytest.mark.asyncio
@pytest.mark.parametrize("company_type, expected", [
    (CompanyType.SERVICE, "Quantitative Aptitude"),
    (CompanyType.PRODUCT, "Data Structures"),
])
async def test_quiz_prompt_follows_company_style(mock_runner, company_type, expected):
    mock_runner.return_value = agent_result({"questions": []})

    await GenerationClient().generate_quiz(make_analysis(company_type=company_type))

    _, prompt = mock_runner.call_args.args
    assert expected in prompt
    assert "10 questions per category" in prompt


@pytest.mark.asyncio
async def test_quiz_calls_are_independent(mock_runner, analysis):
    mock_runner.side_effect = [
        agent_result({"questions": [_question(1, 0), _question(2, 1)]}),
        agent_result({"questions": [_question(1, 3)]}),
    ]
    client = GenerationClient()

    first = await client.generate_quiz(analysis)
    second = await client.generate_quiz(analysis)

    assert len(first) == 2 and len(second) == 1
    for quiz in (first, second):
        assert all(0 <= q.correct_answer < len(q.options) for q in quiz)


# --- code challenges ---

@pytest.mark.asyncio
async def test_challenges_are_capped(mock_runner, analysis):
    challenges = [make_challenge(f"Problem {i}") for i in range(5)]
    mock_runner.return_value = agent_result({"challenges": [c.model_dump(by_alias=True) for c in challenges]})

    result = await GenerationClient().generate_code_challenges(analysis)

    assert len(result) == CHALLENGE_COUNT
    assert [c.title for c in result] == ["Problem 0", "Problem 1", "Problem 2"]
    assert mock_runner.call_args.args[0] is challenge_setter_agent


@pytest.mark.asyncio
async def test_empty_challenges_fall_back_to_two_sum(mock_runner, analysis):
    mock_runner.return_value = agent_result({"challenges": []})

    result = await GenerationClient().generate_code_challenges(analysis)

    assert result == fallback_challenges(analysis)


@pytest.mark.asyncio
async def test_failed_challenges_fall_back_to_two_sum(mock_runner, analysis):
    mock_runner.side_effect = ConnectionError()

    result = await GenerationClient().generate_code_challenges(analysis)

    assert len(result) == 1
    two_sum = result[0]
    assert two_sum.title == "Two Sum"
    assert "Amazon" in two_sum.description
    for language in Language:
        assert two_sum.starter_for(language)


# --- execution & hints ---

@pytest.mark.asyncio
async def test_execute_returns_simulated_verdict(mock_runner):
    mock_runner.return_value = agent_result({
        "status": "Success",
        "errorDetails": None,
        "summary": "2/3 passed.",
        "testCases": [
            {"input": "[2,7], 9", "expectedOutput": "[0,1]", "actualOutput": "[0,1]", "passed": True},
            {"input": "[], 0", "expectedOutput": "[]", "actualOutput": "null", "passed": False},
        ],
    })

    result = await GenerationClient().execute("class Solution {}", Language.JAVA, "Two Sum")

    assert result.status == ExecutionStatus.SUCCESS
    assert [case.passed for case in result.test_cases] == [True, False]
    agent, prompt = mock_runner.call_args.args
    assert agent is code_judge_agent
    assert "Language: java." in prompt


@pytest.mark.asyncio
async def test_execute_falls_back_on_failure(mock_runner):
    mock_runner.side_effect = RuntimeError("judge offline")

    result = await GenerationClient().execute("print(1)", Language.PYTHON, "Two Sum")

    assert result == fallback_execution()
    assert result.status == ExecutionStatus.ERROR
    assert result.test_cases == []


@pytest.mark.asyncio
@pytest.mark.parametrize("output, side_effect, expected", [
    ("Use a hash map to remember what you have seen.", None, "Use a hash map to remember what you have seen."),
    ("   ", None, EMPTY_HINT),
    (None, RuntimeError("boom"), FALLBACK_HINT),
])
async def test_get_hint(mock_runner, output, side_effect, expected):
    mock_runner.return_value = agent_result(output)
    mock_runner.side_effect = side_effect

    hint = await GenerationClient().get_hint("def two_sum(): pass", Language.PYTHON, "Two Sum")

    assert hint == expected
