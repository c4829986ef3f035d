"""YAML-backed gradebook."""

import logging
import shutil
import uuid
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import yaml

from edugrade.analytics.models import GradeInfo, StudentInfo, SubmissionRecord
from .models import (
    Assignment, Classroom, Grade, GradingCriterion, Student, Submission,
    SUBMISSION_STATUSES,
)

LOG = logging.getLogger(__name__)

UNKNOWN_STUDENT = 'Unknown Student'

# YAML section -> entity type
SECTIONS = {
    'classrooms': Classroom,
    'assignments': Assignment,
    'students': Student,
    'submissions': Submission,
    'criteria': GradingCriterion,
    'grades': Grade,
}


class Gradebook:
    """Classrooms, assignments, students, submissions, criteria and grades."""

    def __init__(self, path: Path):
        """
        Load the gradebook.

        Args:
            path: YAML file holding the gradebook (created on first save)
        """
        self.path = Path(path)
        self.classrooms: Dict[str, Classroom] = {}
        self.assignments: Dict[str, Assignment] = {}
        self.students: Dict[str, Student] = {}
        self.submissions: Dict[str, Submission] = {}
        self.criteria: Dict[str, GradingCriterion] = {}
        self.grades: Dict[str, Grade] = {}
        self._load()

        LOG.info(f"Gradebook loaded from {self.path}: {len(self.assignments)} assignments, "
                 f"{len(self.submissions)} submissions, {len(self.grades)} grades")

    def _load(self) -> None:
        if not self.path.exists():
            LOG.warning(f"Gradebook not found, starting empty: {self.path}")
            return

        with open(self.path, 'r') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise TypeError(f"Gradebook {self.path} must be a YAML mapping")

        for section, entity_type in SECTIONS.items():
            table = getattr(self, section)
            for item in data.get(section) or []:
                entity = entity_type.from_dict(item)
                table[entity.id] = entity

    def to_dict(self) -> Dict[str, List[dict]]:
        return {
            section: [entity.to_dict() for entity in getattr(self, section).values()]
            for section in SECTIONS
        }

    def save(self, backup: bool = True) -> None:
        """
        Write the gradebook back to its YAML file.

        Args:
            backup: Whether to copy the previous file aside first
        """
        if backup and self.path.exists():
            backup_path = self.path.with_suffix(
                f'.{datetime.now().strftime("%Y%m%d_%H%M%S")}.yaml.bak'
            )
            shutil.copy(self.path, backup_path)
            LOG.info(f"Created backup: {backup_path}")

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w') as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

        LOG.info(f"Saved gradebook to {self.path}")

    # Classrooms

    def get_classrooms(self, teacher_id: Optional[str] = None) -> List[Classroom]:
        return [c for c in self.classrooms.values()
                if teacher_id is None or c.teacher_id == teacher_id]

    def get_classroom(self, classroom_id: str) -> Optional[Classroom]:
        return self.classrooms.get(classroom_id)

    def upsert_classroom(self, classroom: Classroom) -> Classroom:
        self.classrooms[classroom.id] = classroom
        return classroom

    # Assignments

    def get_assignments(self, classroom_id: Optional[str] = None) -> List[Assignment]:
        return [a for a in self.assignments.values()
                if classroom_id is None or a.classroom_id == classroom_id]

    def get_assignment(self, assignment_id: str) -> Optional[Assignment]:
        return self.assignments.get(assignment_id)

    def upsert_assignment(self, assignment: Assignment) -> Assignment:
        self.assignments[assignment.id] = assignment
        return assignment

    # Students

    def get_students(self, classroom_id: str) -> List[Student]:
        return [s for s in self.students.values() if s.classroom_id == classroom_id]

    def get_student(self, student_id: str) -> Optional[Student]:
        return self.students.get(student_id)

    def upsert_student(self, student: Student) -> Student:
        self.students[student.id] = student
        return student

    # Submissions

    def get_submissions(self, assignment_id: str) -> List[Submission]:
        return [s for s in self.submissions.values() if s.assignment_id == assignment_id]

    def get_submission(self, submission_id: str) -> Optional[Submission]:
        return self.submissions.get(submission_id)

    def upsert_submission(self, submission: Submission) -> Submission:
        self.submissions[submission.id] = submission
        return submission

    def update_submission_status(self, submission_id: str, status: str) -> bool:
        """
        Set a submission's status.

        Returns:
            True if updated, False if the submission does not exist

        Raises:
            ValueError: If the status is not a known status
        """
        if status not in SUBMISSION_STATUSES:
            raise ValueError(f"Unknown submission status: {status}")
        submission = self.submissions.get(submission_id)
        if submission is None:
            return False
        submission.status = status
        return True

    def submission_files(self, submission: Submission) -> List[Path]:
        """Resolve a submission's file paths against the gradebook directory."""
        base = self.path.parent
        return [p if p.is_absolute() else base / p for p in map(Path, submission.files)]

    # Grading criteria

    def get_criteria(self, assignment_id: str) -> List[GradingCriterion]:
        return [c for c in self.criteria.values() if c.assignment_id == assignment_id]

    def set_criteria(self, assignment_id: str, criteria: Iterable[GradingCriterion]) -> List[GradingCriterion]:
        """Replace the rubric of an assignment."""
        for criterion_id in [c.id for c in self.get_criteria(assignment_id)]:
            del self.criteria[criterion_id]

        saved = []
        for criterion in criteria:
            criterion.assignment_id = assignment_id
            if not criterion.id:
                criterion.id = str(uuid.uuid4())
            self.criteria[criterion.id] = criterion
            saved.append(criterion)
        return saved

    # Grades

    def get_grades(self, assignment_id: Optional[str] = None,
                   student_id: Optional[str] = None) -> List[Grade]:
        grades = []
        for grade in self.grades.values():
            if assignment_id and grade.assignment_id != assignment_id:
                continue
            if student_id and grade.student_id != student_id:
                continue
            grades.append(grade)
        return grades

    def get_grade(self, submission_id: str) -> Optional[Grade]:
        """Grade for a submission."""
        for grade in self.grades.values():
            if grade.submission_id == submission_id:
                return grade
        return None

    def get_grade_by_id(self, grade_id: str) -> Optional[Grade]:
        return self.grades.get(grade_id)

    def upsert_grade(self, grade: Grade) -> Grade:
        """Store a grade, replacing any earlier grade for the same submission."""
        existing = self.get_grade(grade.submission_id)
        if existing is not None:
            grade.id = existing.id
            grade.graded_at = existing.graded_at
        elif not grade.id:
            grade.id = str(uuid.uuid4())
        self.grades[grade.id] = grade
        return grade

    def mark_grade_posted(self, grade_id: str) -> bool:
        grade = self.grades.get(grade_id)
        if grade is None:
            return False
        grade.posted = True
        grade.posted_at = datetime.now().isoformat()
        return True

    # Analytics source

    def fetch_grades_for_assignment(self, assignment_id: str) -> List[SubmissionRecord]:
        """Every submission of an assignment with its student and grade."""
        records = []
        for submission in self.get_submissions(assignment_id):
            student = self.get_student(submission.student_id)
            grade = self.get_grade(submission.id)
            records.append(SubmissionRecord(
                id=submission.id,
                student=StudentInfo(
                    name=student.name if student else UNKNOWN_STUDENT,
                    email=student.email if student else None,
                ),
                is_graded=submission.is_graded,
                grade=GradeInfo(
                    total_score=grade.total_score,
                    max_score=grade.max_score,
                    feedback=grade.feedback,
                    criteria_scores=grade.criteria_scores or None,
                ) if grade else None,
            ))
        return records
