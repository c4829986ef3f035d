"""Dashboard aggregates across classrooms and assignments."""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from .engine import LETTER_GRADES, letter_grade, round_half_up

LOG = logging.getLogger(__name__)

TREND_DAYS = 7
TOP_ASSIGNMENTS = 10


def _grade_percentage(grade) -> Optional[float]:
    """Percentage for a stored grade, or None if it cannot be computed."""
    if grade.total_score is None or not grade.max_score or grade.max_score <= 0:
        LOG.warning(f"Skipping grade {grade.id} with unusable scores "
                    f"({grade.total_score}/{grade.max_score})")
        return None
    return grade.total_score / grade.max_score * 100


def _mean(values: List[float]) -> int:
    return int(round_half_up(sum(values) / len(values))) if values else 0


def dashboard_stats(gradebook, teacher_id: Optional[str] = None,
                    today: Optional[date] = None) -> Dict[str, int]:
    """Headline counts for the dashboard."""
    today = today or date.today()
    classrooms = gradebook.get_classrooms(teacher_id)

    total_students = 0
    total_assignments = 0
    pending = 0
    graded_today = 0
    for classroom in classrooms:
        total_students += len(gradebook.get_students(classroom.id))
        assignments = gradebook.get_assignments(classroom.id)
        total_assignments += len(assignments)
        for assignment in assignments:
            pending += sum(1 for s in gradebook.get_submissions(assignment.id) if not s.is_graded)
            graded_today += sum(1 for g in gradebook.get_grades(assignment.id)
                                if g.graded_datetime.date() == today)

    return {
        'classrooms': len(classrooms),
        'students': total_students,
        'assignments': total_assignments,
        'pendingSubmissions': pending,
        'gradedToday': graded_today,
    }


def dashboard_analytics(gradebook, teacher_id: Optional[str] = None,
                        today: Optional[date] = None) -> Dict[str, Any]:
    """
    Grading trend, grade distribution and per-classroom/assignment performance.

    Args:
        gradebook: Gradebook to summarise
        teacher_id: Restrict to one teacher's classrooms
        today: Last day of the grading trend (defaults to today)

    Returns:
        Dictionary ready for JSON serialisation
    """
    today = today or date.today()
    classrooms = gradebook.get_classrooms(teacher_id)

    trend_days = [today - timedelta(days=i) for i in range(TREND_DAYS - 1, -1, -1)]
    trend_counts = {day: 0 for day in trend_days}

    distribution = {letter: 0 for letter in LETTER_GRADES}
    all_percentages: List[float] = []
    classroom_stats = []
    assignment_stats = []

    for classroom in classrooms:
        students = gradebook.get_students(classroom.id)
        assignments = gradebook.get_assignments(classroom.id)
        classroom_grades = 0
        classroom_pending = 0
        classroom_percentages = []

        for assignment in assignments:
            submissions = gradebook.get_submissions(assignment.id)
            grades = gradebook.get_grades(assignment.id)
            classroom_grades += len(grades)
            classroom_pending += sum(1 for s in submissions if not s.is_graded)

            percentages = []
            for grade in grades:
                graded_on = grade.graded_datetime.date()
                if graded_on in trend_counts:
                    trend_counts[graded_on] += 1
                pct = _grade_percentage(grade)
                if pct is not None:
                    percentages.append(pct)
                    distribution[letter_grade(pct)] += 1

            classroom_percentages.extend(percentages)
            if grades:
                assignment_stats.append({
                    'id': assignment.id,
                    'title': assignment.title,
                    'classroomName': classroom.name,
                    'averageScore': _mean(percentages),
                    'submissionRate': int(round_half_up(len(grades) / len(submissions) * 100)) if submissions else 0,
                    'totalSubmissions': len(submissions),
                    'gradedSubmissions': len(grades),
                    'maxPoints': assignment.total_points,
                })

        all_percentages.extend(classroom_percentages)
        expected = len(assignments) * len(students)
        classroom_stats.append({
            'id': classroom.id,
            'name': classroom.name,
            'students': len(students),
            'assignments': len(assignments),
            'totalGrades': classroom_grades,
            'pendingSubmissions': classroom_pending,
            'averageScore': _mean(classroom_percentages),
            'completionRate': int(round_half_up(classroom_grades / expected * 100)) if expected else 0,
        })

    return {
        'gradingTrends': [{'date': day.isoformat(), 'graded': trend_counts[day]} for day in trend_days],
        'gradeDistribution': distribution,
        'classroomStats': classroom_stats,
        'assignmentAnalytics': assignment_stats[:TOP_ASSIGNMENTS],
        'totalGrades': len(all_percentages),
        'averageScore': _mean(all_percentages),
        'generatedAt': datetime.now().isoformat(),
    }
