"""Submission analytics: score statistics, outliers and grade bucketing."""

from .engine import compute_report, letter_grade, percentile, round_half_up
from .errors import MalformedRecordError
from .export import results_csv, write_results_csv
from .models import AnalyticsReport, GradeInfo, ScoreRange, StudentInfo, StudentScore, SubmissionRecord
from .service import GradeSource, assignment_report

__all__ = [
    'compute_report',
    'letter_grade',
    'percentile',
    'round_half_up',
    'MalformedRecordError',
    'results_csv',
    'write_results_csv',
    'AnalyticsReport',
    'GradeInfo',
    'ScoreRange',
    'StudentInfo',
    'StudentScore',
    'SubmissionRecord',
    'GradeSource',
    'assignment_report',
]
