#!/usr/bin/env python3
"""Command-line interface for printing an assignment's analytics report."""

import argparse
import json
import logging
import sys
from pathlib import Path

from edugrade.analytics import MalformedRecordError, assignment_report, write_results_csv
from edugrade.gradebook import Gradebook

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
LOG = logging.getLogger(__name__)


def print_report(report, title: str) -> None:
    """Print a human-readable summary of the report."""
    print(f"\n{'='*60}")
    print(f"Results - {title}")
    print(f"{'='*60}")
    print(f"Graded: {report.total_graded}/{report.total_submissions} ({report.completion_rate}%)")
    print(f"Average: {report.average}%   Median: {report.median}%   Std dev: {report.std_dev}")
    print(f"Range: {report.min}% - {report.max}%   Q1: {report.q1}%   Q3: {report.q3}%")

    print("\nGrade Distribution:")
    for letter, count in report.grade_distribution.items():
        print(f"  {letter}: {count}")

    print("\nScore Ranges:")
    for bucket in report.ranges:
        print(f"  {bucket.label:>8}: {bucket.count:3d} ({bucket.percentage}%)")

    print("\nStudents:")
    for score in report.scores:
        print(f"  {score.student_name}: {score.score:g}/{score.max_score:g} "
              f"({score.percentage}%, {score.letter_grade})")

    if report.outliers:
        low, high = report.outlier_bounds
        print(f"\nStatistical outliers (outside {low}% - {high}%):")
        for score in report.outliers:
            print(f"  {score.student_name}: {score.percentage}%")


def main():
    """Main entry point for grade-report command."""
    parser = argparse.ArgumentParser(
        description='Summarise the graded submissions of an assignment',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print the report
  grade-report --gradebook gradebook.yaml --assignment essay-1

  # Also export the ranked results and the full report
  grade-report --gradebook gradebook.yaml --assignment essay-1 --csv results.csv --json report.json
        """
    )

    parser.add_argument(
        '--gradebook', '-g',
        type=Path,
        required=True,
        help='Path to the gradebook YAML file'
    )
    parser.add_argument(
        '--assignment', '-a',
        required=True,
        help='Assignment id'
    )
    parser.add_argument(
        '--csv',
        type=Path,
        default=None,
        help='Write ranked results to this CSV file'
    )
    parser.add_argument(
        '--json',
        type=Path,
        default=None,
        help='Write the full report to this JSON file'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.gradebook.is_file():
        LOG.error(f"Gradebook does not exist: {args.gradebook}")
        sys.exit(1)

    gradebook = Gradebook(args.gradebook)
    assignment = gradebook.get_assignment(args.assignment)
    if assignment is None:
        LOG.error(f"Assignment not found: {args.assignment}")
        sys.exit(1)

    try:
        report = assignment_report(gradebook, assignment.id)
    except MalformedRecordError as e:
        LOG.error(f"Cannot compute statistics: {e}")
        sys.exit(1)

    if report is None:
        print(f"No graded submissions available for {assignment.title}.")
        return

    print_report(report, assignment.title)

    if args.csv:
        with open(args.csv, 'w', newline='') as f:
            write_results_csv(report, f)
        LOG.info(f"Results saved to: {args.csv}")

    if args.json:
        with open(args.json, 'w') as f:
            json.dump(report.to_dict(), f, indent=2)
        LOG.info(f"Report saved to: {args.json}")


if __name__ == "__main__":
    main()
