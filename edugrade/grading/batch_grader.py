"""Batch grader for an assignment's submissions, using async/await."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from tqdm.asyncio import tqdm

from edugrade.gradebook import Gradebook
from edugrade.libs.config_loader import ConfigType, get_config
from .grader import SubmissionGrader
from .models import GradingError, MissingCriteriaError
from .service import grade_submission_async

LOG = logging.getLogger(__name__)


@dataclass
class BatchGradingResult:
    """Outcome of grading one submission in a batch."""
    submission_id: str
    student_name: str
    total_score: float
    max_score: float
    success: bool
    error_message: Optional[str] = None
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'submission_id': self.submission_id,
            'student_name': self.student_name,
            'total_score': self.total_score,
            'max_score': self.max_score,
            'success': self.success,
            'timestamp': self.timestamp,
        }
        if self.error_message:
            data['error_message'] = self.error_message
        return data


class BatchGrader:
    """Grade all outstanding submissions of an assignment concurrently."""

    def __init__(self, configs: ConfigType, model: Optional[str] = None,
                 settings: Optional[Dict[str, Any]] = None, max_concurrent: Optional[int] = None,
                 grader: Optional[SubmissionGrader] = None):
        """
        Initialize the batch grader.

        Args:
            configs: Configuration dictionary
            model: Optional model override
            settings: Optional settings override
            max_concurrent: Maximum number of concurrent grading tasks (overrides config)
            grader: Grader to use (one is created from configs when omitted)
        """
        self.configs = configs
        self.model = model
        self.settings = settings

        if max_concurrent is not None:
            self.max_concurrent = max_concurrent
        else:
            self.max_concurrent = get_config("tools.max_threads", configs, default=4)

        self.grader = grader or SubmissionGrader(configs=configs, model=model, settings=settings)

        LOG.info(f"BatchGrader initialized with max_concurrent={self.max_concurrent}")

    @staticmethod
    def outstanding_submissions(gradebook: Gradebook, assignment_id: str, regrade: bool = False) -> List[str]:
        """Ids of the submissions still to grade, in a stable order."""
        return sorted(
            s.id for s in gradebook.get_submissions(assignment_id)
            if regrade or not s.is_graded
        )

    async def _grade_one(self, gradebook: Gradebook, submission_id: str) -> BatchGradingResult:
        submission = gradebook.get_submission(submission_id)
        student = gradebook.get_student(submission.student_id)
        student_name = student.name if student else submission.student_id
        assignment = gradebook.get_assignment(submission.assignment_id)
        max_score = assignment.total_points if assignment else 0

        try:
            grade, _ = await grade_submission_async(gradebook, self.grader, submission_id)
        except (GradingError, LookupError) as e:
            gradebook.update_submission_status(submission_id, 'error')
            return BatchGradingResult(
                submission_id=submission_id,
                student_name=student_name,
                total_score=0,
                max_score=max_score,
                success=False,
                error_message=str(e),
            )

        return BatchGradingResult(
            submission_id=submission_id,
            student_name=student_name,
            total_score=grade.total_score,
            max_score=grade.max_score,
            success=True,
        )

    async def grade_assignment_async(self, gradebook: Gradebook, assignment_id: str,
                                     regrade: bool = False,
                                     continue_on_error: bool = True) -> List[BatchGradingResult]:
        """
        Grade an assignment's submissions with concurrency control.

        Args:
            gradebook: Gradebook holding the submissions; grades are stored in it
            assignment_id: Assignment to grade
            regrade: Also grade submissions that already have a grade
            continue_on_error: Keep going when a submission fails; otherwise
                raise GradingError after the first failure

        Returns:
            List of BatchGradingResult sorted by student name
        """
        if gradebook.get_assignment(assignment_id) is None:
            raise LookupError(f"Assignment not found: {assignment_id}")
        if not gradebook.get_criteria(assignment_id):
            raise MissingCriteriaError("No grading criteria set for this assignment")

        submission_ids = self.outstanding_submissions(gradebook, assignment_id, regrade)
        if not submission_ids:
            LOG.info(f"Nothing to grade for assignment {assignment_id}")
            return []

        for submission_id in submission_ids:
            gradebook.update_submission_status(submission_id, 'pending')

        LOG.info(f"Grading {len(submission_ids)} submissions for assignment {assignment_id}")

        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def grade_with_semaphore(submission_id: str) -> BatchGradingResult:
            async with semaphore:
                return await self._grade_one(gradebook, submission_id)

        tasks = [asyncio.ensure_future(grade_with_semaphore(sid)) for sid in submission_ids]

        results = []
        for coro in tqdm.as_completed(tasks, total=len(tasks), desc="Grading submissions"):
            result = await coro
            results.append(result)
            if result.success:
                LOG.debug(f"Completed: {result.student_name} - {result.total_score}/{result.max_score}")
            else:
                LOG.warning(f"Failed: {result.student_name} - {result.error_message}")
                if not continue_on_error:
                    for task in tasks:
                        if not task.done():
                            task.cancel()
                    raise GradingError(f"Grading failed for {result.submission_id}: {result.error_message}")

        results.sort(key=lambda r: r.student_name)
        return results

    def grade_assignment(self, gradebook: Gradebook, assignment_id: str,
                         regrade: bool = False, continue_on_error: bool = True) -> List[BatchGradingResult]:
        """Synchronous wrapper for grade_assignment_async."""
        return asyncio.run(self.grade_assignment_async(
            gradebook, assignment_id, regrade, continue_on_error
        ))
