"""Tests for batch grading functionality."""

import pytest
from unittest.mock import AsyncMock, Mock, patch

from edugrade.grading import (
    AIGradingResult, BatchGrader, BatchGradingResult, GradingError, MissingCriteriaError,
)


@pytest.fixture
def sample_config():
    """Create sample configuration."""
    return {
        'tools': {
            'max_threads': 2
        },
        'llm': {
            'api_key': 'test-key',
            'model': 'deepseek-chat'
        }
    }


@pytest.fixture
def mock_grader():
    """Grader stand-in scoring every submission 85/100."""
    grader = Mock()
    grader.grade_async = AsyncMock(return_value=AIGradingResult(
        total_score=85,
        max_score=100,
        criteria_scores={"Thesis": 35, "Evidence": 50},
        feedback="Overall good work",
    ))
    return grader


@patch('edugrade.grading.batch_grader.SubmissionGrader')
def test_batch_grader_initialization(mock_grader_class, sample_config):
    """Test BatchGrader initialization."""
    grader = BatchGrader(configs=sample_config, max_concurrent=4)
    assert grader.max_concurrent == 4
    assert grader.configs == sample_config
    assert grader.grader is mock_grader_class.return_value
    mock_grader_class.assert_called_once_with(configs=sample_config, model=None, settings=None)


def test_batch_grader_uses_config_threads(sample_config, mock_grader):
    """Test that BatchGrader uses thread count from config."""
    grader = BatchGrader(configs=sample_config, grader=mock_grader)
    assert grader.max_concurrent == 2  # From config


def test_batch_grader_default_threads(mock_grader):
    grader = BatchGrader(configs={}, grader=mock_grader)
    assert grader.max_concurrent == 4


def test_outstanding_submissions(gradebook):
    """Test choosing which submissions to grade."""
    assert BatchGrader.outstanding_submissions(gradebook, 'a1') == ['sub3']
    assert BatchGrader.outstanding_submissions(gradebook, 'a1', regrade=True) == ['sub1', 'sub2', 'sub3']


def test_batch_grading_result_to_dict():
    """Test BatchGradingResult to_dict conversion."""
    result = BatchGradingResult(
        submission_id="sub1",
        student_name="Ann Lee",
        total_score=85,
        max_score=100,
        success=True,
    )

    data = result.to_dict()
    assert data['submission_id'] == "sub1"
    assert data['student_name'] == "Ann Lee"
    assert data['total_score'] == 85
    assert data['max_score'] == 100
    assert data['success'] is True
    assert data['timestamp']
    assert 'error_message' not in data


def test_batch_grading_result_with_error():
    """Test BatchGradingResult with error."""
    result = BatchGradingResult(
        submission_id="sub1",
        student_name="Ann Lee",
        total_score=0,
        max_score=100,
        success=False,
        error_message="Failed to grade"
    )

    data = result.to_dict()
    assert data['success'] is False
    assert data['error_message'] == "Failed to grade"


@pytest.mark.asyncio
async def test_grade_outstanding_async(sample_config, mock_grader, gradebook):
    """Test grading only the ungraded submissions."""
    batch_grader = BatchGrader(configs=sample_config, grader=mock_grader)

    results = await batch_grader.grade_assignment_async(gradebook, 'a1')

    assert len(results) == 1
    assert results[0].success is True
    assert results[0].student_name == "Cy Diaz"
    assert results[0].total_score == 85
    assert gradebook.get_submission('sub3').is_graded
    assert gradebook.get_grade('sub3').feedback == "Overall good work"
    # already graded submissions untouched
    assert gradebook.get_grade('sub1').total_score == 90


@pytest.mark.asyncio
async def test_regrade_all_sorted_by_name(sample_config, mock_grader, gradebook):
    """Test regrading every submission."""
    batch_grader = BatchGrader(configs=sample_config, grader=mock_grader)

    results = await batch_grader.grade_assignment_async(gradebook, 'a1', regrade=True)

    assert [r.student_name for r in results] == ["Ann Lee", "Bob Kim", "Cy Diaz"]
    assert all(r.success for r in results)
    assert mock_grader.grade_async.call_count == 3
    assert len(gradebook.get_grades('a1')) == 3


@pytest.mark.asyncio
async def test_grading_error_continues(sample_config, mock_grader, gradebook):
    """Test that one failure does not stop the batch."""
    success = mock_grader.grade_async.return_value

    def grade_or_fail(content, *args):
        if content.startswith("Bob"):
            raise GradingError("API error")
        return success

    mock_grader.grade_async.side_effect = grade_or_fail
    batch_grader = BatchGrader(configs=sample_config, grader=mock_grader)

    results = await batch_grader.grade_assignment_async(gradebook, 'a1', regrade=True)

    by_name = {r.student_name: r for r in results}
    assert by_name["Bob Kim"].success is False
    assert "API error" in by_name["Bob Kim"].error_message
    assert by_name["Bob Kim"].total_score == 0
    assert by_name["Ann Lee"].success is True
    assert gradebook.get_submission('sub2').status == 'error'
    assert gradebook.get_submission('sub1').status == 'graded'


@pytest.mark.asyncio
async def test_grading_error_stops(sample_config, mock_grader, gradebook):
    """Test stopping at the first failure."""
    mock_grader.grade_async.side_effect = GradingError("API error")
    batch_grader = BatchGrader(configs=sample_config, grader=mock_grader, max_concurrent=1)

    with pytest.raises(GradingError, match="API error"):
        await batch_grader.grade_assignment_async(gradebook, 'a1', continue_on_error=False)


def test_grade_assignment_sync(sample_config, mock_grader, gradebook):
    """Test grading using the sync wrapper."""
    batch_grader = BatchGrader(configs=sample_config, grader=mock_grader)

    results = batch_grader.grade_assignment(gradebook, 'a1')
    assert len(results) == 1

    # nothing left to grade
    assert batch_grader.grade_assignment(gradebook, 'a1') == []


def test_unknown_assignment(sample_config, mock_grader, gradebook):
    batch_grader = BatchGrader(configs=sample_config, grader=mock_grader)

    with pytest.raises(LookupError):
        batch_grader.grade_assignment(gradebook, 'missing')


def test_assignment_without_criteria(sample_config, mock_grader, gradebook):
    batch_grader = BatchGrader(configs=sample_config, grader=mock_grader)

    with pytest.raises(MissingCriteriaError):
        batch_grader.grade_assignment(gradebook, 'a3')

    mock_grader.grade_async.assert_not_called()
    assert gradebook.get_submission('sub5').status == 'ungraded'
