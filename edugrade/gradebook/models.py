"""Gradebook entities."""

from dataclasses import asdict, dataclass, field, fields
from datetime import date, datetime
from typing import Any, Dict, List, Optional

SUBMISSION_STATUSES = ('ungraded', 'pending', 'graded', 'error')


class _Record:
    """YAML conversion shared by the gradebook entities."""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        known = {f.name for f in fields(cls)}
        values = {}
        for k, v in data.items():
            if k not in known:
                continue
            # YAML turns unquoted timestamps into date/datetime objects
            if isinstance(v, (date, datetime)):
                v = v.isoformat()
            elif (k == 'id' or k.endswith('_id')) and v is not None:
                v = str(v)
            values[k] = v
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Classroom(_Record):
    id: str
    name: str
    teacher_id: str = ""
    section: Optional[str] = None
    description: Optional[str] = None


@dataclass
class Assignment(_Record):
    id: str
    classroom_id: str
    title: str
    description: Optional[str] = None
    max_points: Optional[float] = None
    due_date: Optional[str] = None

    @property
    def total_points(self) -> float:
        """Points the assignment is graded out of (100 when unset)."""
        return self.max_points or 100


@dataclass
class Student(_Record):
    id: str
    classroom_id: str
    name: str
    email: Optional[str] = None


@dataclass
class Submission(_Record):
    """A turned-in submission; ``files`` are paths relative to the gradebook."""
    id: str
    assignment_id: str
    student_id: str
    files: List[str] = field(default_factory=list)
    submitted_at: Optional[str] = None
    status: str = 'ungraded'

    @property
    def is_graded(self) -> bool:
        return self.status == 'graded'


@dataclass
class GradingCriterion(_Record):
    """A rubric line set by the instructor."""
    id: str
    assignment_id: str
    name: str
    max_points: float
    description: Optional[str] = None
    weight: int = 25


@dataclass
class Grade(_Record):
    id: str
    submission_id: str
    assignment_id: str
    student_id: str
    total_score: Optional[float] = None
    max_score: Optional[float] = None
    feedback: Optional[str] = None
    criteria_scores: Dict[str, float] = field(default_factory=dict)
    suggestions: List[str] = field(default_factory=list)
    graded_at: str = ""
    posted: bool = False
    posted_at: Optional[str] = None

    def __post_init__(self):
        if not self.graded_at:
            self.graded_at = datetime.now().isoformat()

    @property
    def graded_datetime(self) -> datetime:
        stamp = self.graded_at
        # fromisoformat only accepts a trailing Z from Python 3.11
        if stamp.endswith('Z'):
            stamp = stamp[:-1] + '+00:00'
        return datetime.fromisoformat(stamp)
