"""Tests for the YAML-backed gradebook."""

import pytest
import yaml

from edugrade.analytics import assignment_report
from edugrade.gradebook import Grade, Gradebook, GradingCriterion, Student


def test_load_sample(gradebook):
    """Test that every section is loaded."""
    assert len(gradebook.classrooms) == 2
    assert len(gradebook.assignments) == 3
    assert len(gradebook.students) == 4
    assert len(gradebook.submissions) == 5
    assert len(gradebook.criteria) == 2
    assert len(gradebook.grades) == 2

    assert gradebook.get_assignment('a1').title == 'Essay 1'
    assert gradebook.get_assignment('a3').total_points == 100
    assert gradebook.get_submission('sub1').is_graded
    assert not gradebook.get_submission('sub3').is_graded


def test_missing_file_starts_empty(tmp_path):
    """Test that a missing gradebook file gives an empty gradebook."""
    book = Gradebook(tmp_path / 'new.yaml')
    assert book.get_classrooms() == []
    assert book.get_grades() == []


def test_non_mapping_rejected(tmp_path):
    """Test that TypeError is raised for a non-mapping YAML file."""
    path = tmp_path / 'gradebook.yaml'
    path.write_text("- just\n- a list\n")
    with pytest.raises(TypeError, match="must be a YAML mapping"):
        Gradebook(path)


def test_yaml_scalars_normalised(tmp_path):
    """Test that numeric ids and unquoted timestamps become strings."""
    path = tmp_path / 'gradebook.yaml'
    path.write_text(
        "classrooms:\n"
        "  - id: 7\n"
        "    name: Math\n"
        "    unknown_field: ignored\n"
        "assignments:\n"
        "  - id: 12\n"
        "    classroom_id: 7\n"
        "    title: Homework\n"
        "    due_date: 2026-11-01\n"
    )
    book = Gradebook(path)

    assert book.get_classroom('7').name == 'Math'
    assignment = book.get_assignment('12')
    assert assignment.classroom_id == '7'
    assert assignment.due_date == '2026-11-01'


def test_filters(gradebook):
    """Test the per-teacher and per-parent lookups."""
    assert [c.id for c in gradebook.get_classrooms('t1')] == ['c1']
    assert len(gradebook.get_classrooms()) == 2
    assert [a.id for a in gradebook.get_assignments('c1')] == ['a1', 'a2']
    assert len(gradebook.get_students('c1')) == 3
    assert [s.id for s in gradebook.get_submissions('a1')] == ['sub1', 'sub2', 'sub3']
    assert len(gradebook.get_grades('a1')) == 2
    assert [g.id for g in gradebook.get_grades(student_id='st2')] == ['g2']


def test_update_submission_status(gradebook):
    """Test status updates and validation."""
    assert gradebook.update_submission_status('sub3', 'pending')
    assert gradebook.get_submission('sub3').status == 'pending'
    assert not gradebook.update_submission_status('missing', 'graded')

    with pytest.raises(ValueError, match="Unknown submission status"):
        gradebook.update_submission_status('sub3', 'done')


def test_submission_files_resolved(gradebook, gradebook_path):
    """Test that file paths are resolved against the gradebook directory."""
    files = gradebook.submission_files(gradebook.get_submission('sub1'))
    assert files == [gradebook_path.parent / 'submissions' / 'ann.txt']
    assert files[0].read_text() == "Ann's essay on cells."


def test_set_criteria_replaces(gradebook):
    """Test that setting criteria replaces the rubric of one assignment only."""
    saved = gradebook.set_criteria('a1', [
        GradingCriterion(id='', assignment_id='', name='Style', max_points=10),
    ])

    criteria = gradebook.get_criteria('a1')
    assert len(criteria) == 1
    assert criteria[0].name == 'Style'
    assert criteria[0].assignment_id == 'a1'
    assert saved[0].id  # generated
    assert gradebook.get_criteria('a2') == []


def test_upsert_grade_replaces_existing(gradebook):
    """Test that regrading keeps the grade id and original timestamp."""
    grade = gradebook.upsert_grade(Grade(
        id='', submission_id='sub1', assignment_id='a1', student_id='st1',
        total_score=95, max_score=100, feedback='Even better',
    ))

    assert grade.id == 'g1'
    assert grade.graded_at == '2026-10-15T10:00:00'
    assert gradebook.get_grade('sub1').total_score == 95
    assert len(gradebook.grades) == 2


def test_upsert_grade_new(gradebook):
    """Test that a first grade gets a fresh id and timestamp."""
    grade = gradebook.upsert_grade(Grade(
        id='', submission_id='sub3', assignment_id='a1', student_id='st3',
        total_score=60, max_score=100,
    ))

    assert grade.id
    assert grade.graded_at
    assert gradebook.get_grade_by_id(grade.id) is grade


def test_mark_grade_posted(gradebook):
    """Test releasing a grade."""
    assert gradebook.mark_grade_posted('g2')
    grade = gradebook.get_grade_by_id('g2')
    assert grade.posted
    assert grade.posted_at
    assert not gradebook.mark_grade_posted('missing')


def test_save_round_trip_with_backup(gradebook, gradebook_path):
    """Test saving writes a backup and preserves content."""
    gradebook.upsert_student(Student(id='st9', classroom_id='c2', name='Eve Park'))
    gradebook.save()

    backups = list(gradebook_path.parent.glob('gradebook.*.yaml.bak'))
    assert len(backups) == 1
    with open(backups[0]) as f:
        assert 'st9' not in [s['id'] for s in yaml.safe_load(f)['students']]

    reloaded = Gradebook(gradebook_path)
    assert reloaded.get_student('st9').name == 'Eve Park'
    assert reloaded.get_grade('sub1').criteria_scores == {'Thesis': 36, 'Evidence': 54}
    assert reloaded.to_dict() == gradebook.to_dict()


def test_save_without_backup(gradebook, gradebook_path):
    """Test that backups can be skipped."""
    gradebook.save(backup=False)
    assert list(gradebook_path.parent.glob('*.bak')) == []


def test_fetch_grades_for_assignment(gradebook):
    """Test the analytics view of an assignment's submissions."""
    records = gradebook.fetch_grades_for_assignment('a1')

    assert [r.id for r in records] == ['sub1', 'sub2', 'sub3']
    assert records[0].student.name == 'Ann Lee'
    assert records[0].is_graded
    assert records[0].grade.total_score == 90
    assert records[0].grade.criteria_scores == {'Thesis': 36, 'Evidence': 54}
    assert not records[2].is_graded
    assert records[2].grade is None


def test_fetch_grades_unknown_student(gradebook):
    """Test that submissions from removed students still appear."""
    del gradebook.students['st2']
    records = gradebook.fetch_grades_for_assignment('a1')
    assert records[1].student.name == 'Unknown Student'


def test_assignment_report_from_gradebook(gradebook):
    """Test computing the report straight from the gradebook."""
    report = assignment_report(gradebook, 'a1')

    assert report.total_graded == 2
    assert report.total_submissions == 3
    assert report.completion_rate == 67
    assert report.average == 80
    assert [s.student_name for s in report.scores] == ['Ann Lee', 'Bob Kim']

    assert assignment_report(gradebook, 'a3') is None
