"""Integration tests for AI grading that hit the actual API."""

import os
import pytest

from edugrade.grading import CriterionSpec, SubmissionGrader
from edugrade.libs.config_loader import get_config, load_all_configs
from edugrade.libs.llm import API_KEY_ENV


def _has_api_key():
    try:
        configs = load_all_configs()
    except (ValueError, TypeError):
        return False
    return bool(get_config("llm.api_key", configs, default=None) or os.environ.get(API_KEY_ENV))


# Mark all tests in this file as integration tests
pytestmark = [
    pytest.mark.integration_test,
    pytest.mark.skipif(not _has_api_key(), reason="no LLM API key configured"),
]


@pytest.mark.asyncio
async def test_grade_short_essay():
    """Test grading a tiny submission end to end."""
    grader = SubmissionGrader(configs=load_all_configs())
    criteria = [
        CriterionSpec(name="Accuracy", max_points=6, weight=60, description="Facts are correct"),
        CriterionSpec(name="Clarity", max_points=4, weight=40, description="Easy to follow"),
    ]

    result = await grader.grade_async(
        "Photosynthesis turns light, water and carbon dioxide into glucose and oxygen.",
        "Photosynthesis in one sentence",
        criteria,
        10,
    )

    assert 0 <= result.total_score <= 10
    assert result.max_score == 10
    assert result.feedback
