"""Gradebook persistence."""

from .models import Assignment, Classroom, Grade, GradingCriterion, Student, Submission
from .store import Gradebook

__all__ = [
    'Gradebook',
    'Assignment',
    'Classroom',
    'Grade',
    'GradingCriterion',
    'Student',
    'Submission',
]
