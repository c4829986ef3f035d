"""Score aggregation for graded submissions.

Everything here is a pure function of its input: percentages are derived from
each grade, summarised (mean, median, population standard deviation, quartiles),
screened for Tukey outliers and bucketed into letter grades and a ten-bucket
histogram. Callers get ``None`` back when nothing has been graded yet.
"""

import logging
import math
import statistics
from typing import Iterable, List, Optional, Sequence

from .errors import MalformedRecordError
from .models import AnalyticsReport, ScoreRange, StudentScore, SubmissionRecord

LOG = logging.getLogger(__name__)

LETTER_THRESHOLDS = (
    ('A', 90),
    ('B', 80),
    ('C', 70),
    ('D', 60),
)
LETTER_GRADES = ('A', 'B', 'C', 'D', 'F')
HISTOGRAM_BUCKETS = 10
OUTLIER_FACTOR = 1.5


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up (2.25 -> 2.3), unlike Python's round()."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def letter_grade(percentage: float) -> str:
    """Map a percentage to its A-F letter."""
    for letter, threshold in LETTER_THRESHOLDS:
        if percentage >= threshold:
            return letter
    return 'F'


def percentile(values: Sequence[float], p: float) -> float:
    """
    Percentile by linear interpolation between order statistics.

    The rank is ``p/100 * (n-1)``; an integral rank returns that order
    statistic, otherwise the two neighbours are weighted by the fractional part.
    """
    ordered = sorted(values)
    index = (p / 100) * (len(ordered) - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    if lower == upper:
        return ordered[lower]
    weight = index - lower
    return ordered[lower] * (1 - weight) + ordered[upper] * weight


def _validate(record: SubmissionRecord) -> None:
    grade = record.grade
    if grade.max_score is None:
        raise MalformedRecordError(record.id, "missing max score")
    if not math.isfinite(grade.max_score) or grade.max_score <= 0:
        raise MalformedRecordError(record.id, f"max score must be positive, got {grade.max_score}")
    if grade.total_score is None:
        raise MalformedRecordError(record.id, "missing total score")
    if not math.isfinite(grade.total_score) or grade.total_score < 0:
        raise MalformedRecordError(record.id, f"total score must be non-negative, got {grade.total_score}")
    if grade.total_score > grade.max_score:
        raise MalformedRecordError(
            record.id,
            f"total score {grade.total_score} exceeds max score {grade.max_score}"
        )


def graded_records(submissions: Iterable[SubmissionRecord]) -> List[SubmissionRecord]:
    """
    Select the records that take part in score statistics.

    Raises:
        MalformedRecordError: If any graded record has an unusable grade
    """
    graded = [s for s in submissions if s.participates]
    for record in graded:
        _validate(record)
    return graded


def _student_score(record: SubmissionRecord) -> StudentScore:
    grade = record.grade
    percentage = round_half_up(grade.total_score / grade.max_score * 100, 1)
    return StudentScore(
        submission_id=record.id,
        student_name=record.student.name,
        score=grade.total_score,
        max_score=grade.max_score,
        percentage=percentage,
        letter_grade=letter_grade(percentage),
        feedback=grade.feedback or "",
    )


def _histogram(percentages: Sequence[float]) -> List[ScoreRange]:
    counts = [0] * HISTOGRAM_BUCKETS
    width = 100 // HISTOGRAM_BUCKETS
    for pct in percentages:
        # 100% belongs to the last bucket
        counts[min(int(pct // width), HISTOGRAM_BUCKETS - 1)] += 1
    total = len(percentages)
    return [
        ScoreRange(
            start=i * width,
            end=(i + 1) * width,
            count=count,
            percentage=int(round_half_up(count / total * 100)),
        )
        for i, count in enumerate(counts)
    ]


def compute_report(submissions: Sequence[SubmissionRecord]) -> Optional[AnalyticsReport]:
    """
    Compute the analytics report for one assignment.

    Args:
        submissions: Every submission of the assignment, graded or not

    Returns:
        AnalyticsReport, or None when no submission has been graded

    Raises:
        MalformedRecordError: If a graded submission has a missing or
            non-positive max score (or an unusable total score); nothing
            is computed in that case
    """
    submissions = list(submissions)
    graded = graded_records(submissions)
    if not graded:
        LOG.debug("No graded submissions among %d", len(submissions))
        return None

    # sorted() with reverse=True keeps encounter order for ties
    scores = sorted((_student_score(r) for r in graded),
                    key=lambda s: s.percentage, reverse=True)
    percentages = [s.percentage for s in scores]

    mean = statistics.fmean(percentages)
    q1 = percentile(percentages, 25)
    q3 = percentile(percentages, 75)
    iqr = q3 - q1
    lower_bound = q1 - OUTLIER_FACTOR * iqr
    upper_bound = q3 + OUTLIER_FACTOR * iqr
    outliers = [s for s in scores if s.percentage < lower_bound or s.percentage > upper_bound]

    distribution = {letter: 0 for letter in LETTER_GRADES}
    for s in scores:
        distribution[s.letter_grade] += 1

    return AnalyticsReport(
        total_graded=len(graded),
        total_submissions=len(submissions),
        completion_rate=int(round_half_up(len(graded) / len(submissions) * 100)),
        scores=scores,
        average=round_half_up(mean, 1),
        median=round_half_up(statistics.median(percentages), 1),
        min=min(percentages),
        max=max(percentages),
        std_dev=round_half_up(statistics.pstdev(percentages, mean), 1),
        q1=round_half_up(q1, 1),
        q3=round_half_up(q3, 1),
        iqr=round_half_up(iqr, 1),
        outlier_bounds=(round_half_up(lower_bound, 1), round_half_up(upper_bound, 1)),
        outliers=outliers,
        grade_distribution=distribution,
        ranges=_histogram(percentages),
    )
