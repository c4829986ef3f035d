"""Report entry point shared by the dashboard views and the exports."""

import logging
from typing import List, Optional, Protocol

from .engine import compute_report
from .models import AnalyticsReport, SubmissionRecord

LOG = logging.getLogger(__name__)


class GradeSource(Protocol):
    """Anything that can list an assignment's submissions with their grades."""

    def fetch_grades_for_assignment(self, assignment_id: str) -> List[SubmissionRecord]:
        ...


def assignment_report(source: GradeSource, assignment_id: str) -> Optional[AnalyticsReport]:
    """
    Build the analytics report for one assignment.

    Returns:
        AnalyticsReport, or None when nothing has been graded

    Raises:
        MalformedRecordError: If a graded submission has an unusable grade
    """
    records = source.fetch_grades_for_assignment(assignment_id)
    LOG.debug(f"Computing analytics for assignment {assignment_id} over {len(records)} submissions")
    return compute_report(records)
