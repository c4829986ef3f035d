"""Shared fixtures for gradebook-backed tests."""

import pytest
import yaml

from edugrade.gradebook import Gradebook


SAMPLE_GRADEBOOK = {
    'classrooms': [
        {'id': 'c1', 'name': 'Biology 101', 'teacher_id': 't1'},
        {'id': 'c2', 'name': 'Chemistry', 'teacher_id': 't2'},
    ],
    'assignments': [
        {'id': 'a1', 'classroom_id': 'c1', 'title': 'Essay 1', 'max_points': 100},
        {'id': 'a2', 'classroom_id': 'c1', 'title': 'Lab Report', 'max_points': 50},
        {'id': 'a3', 'classroom_id': 'c2', 'title': 'Quiz'},
    ],
    'students': [
        {'id': 'st1', 'classroom_id': 'c1', 'name': 'Ann Lee', 'email': 'ann@example.edu'},
        {'id': 'st2', 'classroom_id': 'c1', 'name': 'Bob Kim'},
        {'id': 'st3', 'classroom_id': 'c1', 'name': 'Cy Diaz'},
        {'id': 'st4', 'classroom_id': 'c2', 'name': 'Dee Roy'},
    ],
    'submissions': [
        {'id': 'sub1', 'assignment_id': 'a1', 'student_id': 'st1',
         'files': ['submissions/ann.txt'], 'status': 'graded'},
        {'id': 'sub2', 'assignment_id': 'a1', 'student_id': 'st2',
         'files': ['submissions/bob.txt'], 'status': 'graded'},
        {'id': 'sub3', 'assignment_id': 'a1', 'student_id': 'st3',
         'files': ['submissions/cy.txt'], 'status': 'ungraded'},
        {'id': 'sub4', 'assignment_id': 'a2', 'student_id': 'st1',
         'files': [], 'status': 'pending'},
        {'id': 'sub5', 'assignment_id': 'a3', 'student_id': 'st4',
         'files': ['submissions/dee.txt'], 'status': 'ungraded'},
    ],
    'criteria': [
        {'id': 'cr1', 'assignment_id': 'a1', 'name': 'Thesis', 'max_points': 40, 'weight': 40,
         'description': 'Clear, arguable thesis'},
        {'id': 'cr2', 'assignment_id': 'a1', 'name': 'Evidence', 'max_points': 60, 'weight': 60},
    ],
    'grades': [
        {'id': 'g1', 'submission_id': 'sub1', 'assignment_id': 'a1', 'student_id': 'st1',
         'total_score': 90, 'max_score': 100, 'feedback': 'Excellent work',
         'criteria_scores': {'Thesis': 36, 'Evidence': 54}, 'graded_at': '2026-10-15T10:00:00'},
        {'id': 'g2', 'submission_id': 'sub2', 'assignment_id': 'a1', 'student_id': 'st2',
         'total_score': 70, 'max_score': 100, 'feedback': 'Needs more evidence',
         'criteria_scores': {'Thesis': 0}, 'graded_at': '2026-10-18T09:00:00'},
    ],
}


@pytest.fixture
def gradebook_path(tmp_path):
    """Write the sample gradebook and its submission files to a temp directory."""
    submissions_dir = tmp_path / 'submissions'
    submissions_dir.mkdir()
    (submissions_dir / 'ann.txt').write_text("Ann's essay on cells.")
    (submissions_dir / 'bob.txt').write_text("Bob's essay on mitochondria.")
    (submissions_dir / 'cy.txt').write_text("Cy's essay on photosynthesis.")
    (submissions_dir / 'dee.txt').write_text("Dee's quiz answers.")

    path = tmp_path / 'gradebook.yaml'
    with open(path, 'w') as f:
        yaml.safe_dump(SAMPLE_GRADEBOOK, f)
    return path


@pytest.fixture
def gradebook(gradebook_path):
    """Loaded sample gradebook."""
    return Gradebook(gradebook_path)
