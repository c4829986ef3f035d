"""Flask web application for the grading dashboard."""

import logging
from typing import Optional

from flask import Flask, Response, jsonify, render_template, request
from flask_cors import CORS

from edugrade.analytics import MalformedRecordError, assignment_report, results_csv
from edugrade.analytics.criteria import criteria_performance
from edugrade.analytics.overview import dashboard_analytics, dashboard_stats
from edugrade.gradebook import Gradebook, GradingCriterion
from edugrade.grading import GradingError, MissingCriteriaError, SubmissionGrader
from edugrade.grading.service import NotFoundError, grade_submission
from edugrade.libs.config_loader import ConfigType

LOG = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)

# Global state, set by create_app
gradebook: Optional[Gradebook] = None
grader: Optional[SubmissionGrader] = None
app_configs: Optional[ConfigType] = None


def create_app(book: Gradebook, submission_grader: Optional[SubmissionGrader] = None,
               configs: Optional[ConfigType] = None) -> Flask:
    """
    Create and configure the Flask app.

    Args:
        book: Gradebook to serve
        submission_grader: Grader for AI grading requests
        configs: Configuration used to create a grader on first use
    """
    global gradebook, grader, app_configs
    gradebook = book
    grader = submission_grader
    app_configs = configs

    LOG.info("Flask app created and configured")
    return app


def _get_grader() -> SubmissionGrader:
    global grader
    if grader is None:
        if app_configs is None:
            raise GradingError("AI grading is not configured")
        try:
            grader = SubmissionGrader(configs=app_configs)
        except ValueError as e:
            raise GradingError(f"AI grading is not configured: {e}")
    return grader


def _not_found(message: str):
    return jsonify({'success': False, 'error': message}), 404


@app.errorhandler(MalformedRecordError)
def handle_malformed_record(error: MalformedRecordError):
    LOG.warning(f"Rejected analytics request: {error}")
    return jsonify({
        'success': False,
        'error': str(error),
        'recordId': error.record_id,
    }), 422


@app.route('/')
def index():
    """Serve the dashboard page."""
    return render_template('dashboard.html',
                           stats=dashboard_stats(gradebook),
                           assignments=gradebook.get_assignments())


@app.route('/api/dashboard/stats', methods=['GET'])
def get_dashboard_stats():
    teacher_id = request.args.get('teacher')
    return jsonify({'success': True, 'stats': dashboard_stats(gradebook, teacher_id)})


@app.route('/api/dashboard/analytics', methods=['GET'])
def get_dashboard_analytics():
    teacher_id = request.args.get('teacher')
    return jsonify({'success': True, 'analytics': dashboard_analytics(gradebook, teacher_id)})


@app.route('/api/classrooms', methods=['GET'])
def get_classrooms():
    teacher_id = request.args.get('teacher')
    return jsonify({
        'success': True,
        'classrooms': [c.to_dict() for c in gradebook.get_classrooms(teacher_id)]
    })


@app.route('/api/classrooms/<classroom_id>', methods=['GET'])
def get_classroom(classroom_id: str):
    classroom = gradebook.get_classroom(classroom_id)
    if classroom is None:
        return _not_found('Classroom not found')

    assignments = []
    for assignment in gradebook.get_assignments(classroom_id):
        data = assignment.to_dict()
        data['criteria'] = [c.to_dict() for c in gradebook.get_criteria(assignment.id)]
        assignments.append(data)

    data = classroom.to_dict()
    data['students'] = [s.to_dict() for s in gradebook.get_students(classroom_id)]
    data['assignments'] = assignments
    return jsonify({'success': True, 'classroom': data})


@app.route('/api/assignments/<assignment_id>/submissions', methods=['GET'])
def get_submissions(assignment_id: str):
    """Submissions with their student and grade."""
    if gradebook.get_assignment(assignment_id) is None:
        return _not_found('Assignment not found')

    submissions = []
    for submission in gradebook.get_submissions(assignment_id):
        data = submission.to_dict()
        student = gradebook.get_student(submission.student_id)
        grade = gradebook.get_grade(submission.id)
        data['student'] = student.to_dict() if student else {'id': submission.student_id,
                                                              'name': 'Unknown Student'}
        data['grade'] = grade.to_dict() if grade else None
        submissions.append(data)

    return jsonify({'success': True, 'submissions': submissions})


@app.route('/api/assignments/<assignment_id>/analytics', methods=['GET'])
def get_assignment_analytics(assignment_id: str):
    """Score statistics for an assignment; ``analytics`` is null until something is graded."""
    assignment = gradebook.get_assignment(assignment_id)
    if assignment is None:
        return _not_found('Assignment not found')

    report = assignment_report(gradebook, assignment_id)
    performance = criteria_performance(gradebook.get_criteria(assignment_id),
                                       gradebook.get_grades(assignment_id))
    return jsonify({
        'success': True,
        'assignment': assignment.to_dict(),
        'analytics': report.to_dict() if report else None,
        'criteriaPerformance': performance,
    })


@app.route('/api/assignments/<assignment_id>/results.csv', methods=['GET'])
def export_results(assignment_id: str):
    """Download the ranked results as CSV."""
    assignment = gradebook.get_assignment(assignment_id)
    if assignment is None:
        return _not_found('Assignment not found')

    report = assignment_report(gradebook, assignment_id)
    if report is None:
        return _not_found('No graded submissions available yet')

    filename = f"{assignment.title}_results.csv".replace('"', '')
    return Response(
        results_csv(report),
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )


@app.route('/api/assignments/<assignment_id>/criteria', methods=['GET'])
def get_criteria(assignment_id: str):
    criteria = gradebook.get_criteria(assignment_id)
    return jsonify({'success': True, 'criteria': [c.to_dict() for c in criteria]})


@app.route('/api/assignments/<assignment_id>/criteria', methods=['POST'])
def set_criteria(assignment_id: str):
    """Replace the grading criteria of an assignment."""
    if gradebook.get_assignment(assignment_id) is None:
        return _not_found('Assignment not found')

    payload = request.get_json(silent=True) or {}
    items = payload.get('criteria')
    if not isinstance(items, list):
        return jsonify({'success': False, 'error': 'Criteria must be an array'}), 400

    criteria = []
    for item in items:
        try:
            max_points = float(item['maxPoints'])
            criteria.append(GradingCriterion(
                id='',
                assignment_id=assignment_id,
                name=str(item['name']),
                max_points=max_points,
                description=item.get('description'),
                weight=int(item.get('weight', 25)),
            ))
        except (KeyError, TypeError, ValueError) as e:
            return jsonify({'success': False, 'error': f'Invalid criterion: {e}'}), 400
        if max_points <= 0:
            return jsonify({'success': False, 'error': 'maxPoints must be positive'}), 400

    saved = gradebook.set_criteria(assignment_id, criteria)
    return jsonify({'success': True, 'criteria': [c.to_dict() for c in saved]})


@app.route('/api/assignments/<assignment_id>/submissions/mark-pending', methods=['POST'])
def mark_pending(assignment_id: str):
    payload = request.get_json(silent=True) or {}
    submission_ids = payload.get('submissionIds')
    if not isinstance(submission_ids, list):
        return jsonify({'success': False, 'error': 'Invalid submission IDs provided'}), 400

    updated = sum(1 for sid in submission_ids if gradebook.update_submission_status(sid, 'pending'))
    return jsonify({'success': True, 'message': 'Submissions marked as pending', 'count': updated})


@app.route('/api/submissions/<submission_id>/grade', methods=['GET'])
def get_grade(submission_id: str):
    if gradebook.get_submission(submission_id) is None:
        return _not_found('Submission not found')

    grade = gradebook.get_grade(submission_id)
    if grade is None:
        return _not_found('No existing grade found')
    return jsonify({'success': True, 'grade': grade.to_dict()})


@app.route('/api/submissions/<submission_id>/grade', methods=['POST'])
def ai_grade_submission(submission_id: str):
    """Grade a submission with the language model."""
    try:
        grade, result = grade_submission(gradebook, _get_grader(), submission_id)
    except NotFoundError as e:
        return _not_found(str(e))
    except MissingCriteriaError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    except GradingError as e:
        LOG.error(f"Grading failed for {submission_id}: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500

    return jsonify({'success': True, 'grade': grade.to_dict(), 'aiResult': result.to_dict()})


@app.route('/api/grades/pending', methods=['GET'])
def get_pending_grades():
    """Grades not yet released to students."""
    pending = []
    for grade in gradebook.get_grades():
        if grade.posted:
            continue
        submission = gradebook.get_submission(grade.submission_id)
        student = gradebook.get_student(grade.student_id)
        assignment = gradebook.get_assignment(grade.assignment_id)
        data = grade.to_dict()
        data['submission'] = submission.to_dict() if submission else None
        data['student'] = student.to_dict() if student else None
        data['assignment'] = assignment.to_dict() if assignment else None
        pending.append(data)
    return jsonify({'success': True, 'grades': pending})


@app.route('/api/grades/<grade_id>/post', methods=['POST'])
def post_grade(grade_id: str):
    """Mark a grade as released."""
    if not gradebook.mark_grade_posted(grade_id):
        return _not_found('Grade not found')
    return jsonify({'success': True, 'message': 'Grade posted successfully'})


@app.route('/api/save', methods=['POST'])
def save_gradebook():
    """Write the gradebook to disk."""
    payload = request.get_json(silent=True) or {}
    gradebook.save(backup=payload.get('backup', True))
    return jsonify({'success': True, 'message': 'Gradebook saved successfully'})


def run_server(host='127.0.0.1', port=5000, debug=False):
    """
    Run the Flask development server.

    Args:
        host: Host to bind to
        port: Port to bind to
        debug: Whether to run in debug mode
    """
    app.run(host=host, port=port, debug=debug)
