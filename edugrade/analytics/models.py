"""Input records and report structures for submission analytics."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    """Accepts both the camelCase wire shape and snake_case field names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StudentInfo(_WireModel):
    """The student a submission belongs to."""
    name: str = Field(description="Display name of the student")
    email: Optional[str] = Field(default=None, description="Student email, if known")


class GradeInfo(_WireModel):
    """Grade attached to a submission."""
    total_score: Optional[float] = Field(default=None, description="Points earned")
    max_score: Optional[float] = Field(default=None, description="Maximum possible points")
    feedback: Optional[str] = Field(default=None, description="Feedback for the student")
    criteria_scores: Optional[Dict[str, float]] = Field(
        default=None,
        description="Points per grading criterion, keyed by criterion name"
    )


class SubmissionRecord(_WireModel):
    """A submission as seen by the analytics engine."""
    id: str = Field(description="Submission id")
    student: StudentInfo
    is_graded: bool = Field(default=False, description="Whether the submission has been graded")
    grade: Optional[GradeInfo] = Field(default=None, description="Grade, when graded")

    @property
    def participates(self) -> bool:
        """Whether this record counts toward score statistics."""
        return self.is_graded and self.grade is not None


@dataclass(frozen=True)
class StudentScore:
    """One ranked row of the per-student results table."""
    submission_id: str
    student_name: str
    score: float
    max_score: float
    percentage: float
    letter_grade: str
    feedback: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'submissionId': self.submission_id,
            'studentName': self.student_name,
            'score': self.score,
            'maxScore': self.max_score,
            'percentage': self.percentage,
            'letterGrade': self.letter_grade,
            'feedback': self.feedback,
        }


@dataclass(frozen=True)
class ScoreRange:
    """One histogram bucket over percentages."""
    start: int
    end: int
    count: int
    percentage: int

    @property
    def label(self) -> str:
        return f"{self.start}-{self.end}%"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'range': self.label,
            'start': self.start,
            'end': self.end,
            'count': self.count,
            'percentage': self.percentage,
        }


@dataclass(frozen=True)
class AnalyticsReport:
    """Descriptive statistics for one assignment's graded submissions."""
    total_graded: int
    total_submissions: int
    completion_rate: int
    scores: List[StudentScore]
    average: float
    median: float
    min: float
    max: float
    std_dev: float
    q1: float
    q3: float
    iqr: float
    outlier_bounds: Tuple[float, float]
    outliers: List[StudentScore]
    grade_distribution: Dict[str, int]
    ranges: List[ScoreRange] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON shape consumed by the dashboard."""
        return {
            'totalGraded': self.total_graded,
            'totalSubmissions': self.total_submissions,
            'completionRate': self.completion_rate,
            'scores': [s.to_dict() for s in self.scores],
            'average': self.average,
            'median': self.median,
            'min': self.min,
            'max': self.max,
            'stdDev': self.std_dev,
            'q1': self.q1,
            'q3': self.q3,
            'iqr': self.iqr,
            'outlierBounds': list(self.outlier_bounds),
            'outliers': [s.to_dict() for s in self.outliers],
            'gradeDistribution': dict(self.grade_distribution),
            'ranges': [r.to_dict() for r in self.ranges],
        }
