"""AI grading of submissions against rubric criteria."""

from .grader import SubmissionGrader, read_submission_content
from .rubric_parser import RubricParser
from .models import AIGradingResult, CriterionSpec, GradingError, MissingCriteriaError
from .batch_grader import BatchGrader, BatchGradingResult

__all__ = [
    'SubmissionGrader',
    'read_submission_content',
    'RubricParser',
    'AIGradingResult',
    'CriterionSpec',
    'GradingError',
    'MissingCriteriaError',
    'BatchGrader',
    'BatchGradingResult',
]
