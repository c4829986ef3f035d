"""Grade a stored submission and record the result in the gradebook."""

import asyncio
import logging
from typing import List, Tuple

from edugrade.gradebook import Grade, Gradebook, GradingCriterion
from .grader import SubmissionGrader, read_submission_content
from .models import AIGradingResult, CriterionSpec, GradingError, MissingCriteriaError

LOG = logging.getLogger(__name__)


class NotFoundError(LookupError):
    """A submission or assignment referenced for grading does not exist."""


def criteria_specs(criteria: List[GradingCriterion]) -> List[CriterionSpec]:
    return [
        CriterionSpec(name=c.name, max_points=c.max_points, weight=c.weight, description=c.description)
        for c in criteria
    ]


async def grade_submission_async(gradebook: Gradebook, grader: SubmissionGrader,
                                 submission_id: str) -> Tuple[Grade, AIGradingResult]:
    """
    AI-grade one submission and store the grade.

    The submission is marked ``graded`` on success and ``error`` when the
    model request fails.

    Raises:
        NotFoundError: If the submission or its assignment is unknown
        GradingError: If the assignment has no criteria, the submission has
            no files, or the model request fails
    """
    submission = gradebook.get_submission(submission_id)
    if submission is None:
        raise NotFoundError(f"Submission not found: {submission_id}")

    assignment = gradebook.get_assignment(submission.assignment_id)
    if assignment is None:
        raise NotFoundError(f"Assignment not found: {submission.assignment_id}")

    criteria = gradebook.get_criteria(assignment.id)
    if not criteria:
        raise MissingCriteriaError("No grading criteria set for this assignment")

    files = gradebook.submission_files(submission)
    if not files:
        raise GradingError(f"Submission {submission_id} has no files")

    try:
        content = read_submission_content(files)
    except OSError as e:
        raise GradingError(f"Could not read submission {submission_id}: {e}") from e

    try:
        result = await grader.grade_async(
            content, assignment.title, criteria_specs(criteria), assignment.total_points
        )
    except GradingError:
        gradebook.update_submission_status(submission.id, 'error')
        raise

    grade = gradebook.upsert_grade(Grade(
        id='',
        submission_id=submission.id,
        assignment_id=assignment.id,
        student_id=submission.student_id,
        total_score=result.total_score,
        max_score=result.max_score,
        feedback=result.feedback,
        criteria_scores=dict(result.criteria_scores),
        suggestions=list(result.suggestions),
    ))
    gradebook.update_submission_status(submission.id, 'graded')

    LOG.info(f"Graded submission {submission.id}: {grade.total_score}/{grade.max_score}")
    return grade, result


def grade_submission(gradebook: Gradebook, grader: SubmissionGrader,
                     submission_id: str) -> Tuple[Grade, AIGradingResult]:
    """Synchronous wrapper around grade_submission_async."""
    return asyncio.run(grade_submission_async(gradebook, grader, submission_id))
