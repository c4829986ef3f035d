"""CSV export of an assignment's ranked results."""

import csv
import io
from typing import TextIO

from .models import AnalyticsReport

CSV_HEADER = ["Student Name", "Score", "Max Score", "Percentage", "Letter Grade", "Feedback"]


def _format_number(value: float) -> str:
    return f"{value:g}"


def write_results_csv(report: AnalyticsReport, stream: TextIO) -> None:
    """Write one row per ranked student to ``stream``."""
    writer = csv.writer(stream)
    writer.writerow(CSV_HEADER)
    for score in report.scores:
        writer.writerow([
            score.student_name,
            _format_number(score.score),
            _format_number(score.max_score),
            f"{_format_number(score.percentage)}%",
            score.letter_grade,
            score.feedback,
        ])


def results_csv(report: AnalyticsReport) -> str:
    """Render the results table as CSV text."""
    buffer = io.StringIO()
    write_results_csv(report, buffer)
    return buffer.getvalue()
