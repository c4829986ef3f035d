#!/usr/bin/env python3
"""Command-line interface for AI-grading an assignment's submissions."""

import argparse
import logging
import sys
from pathlib import Path

from edugrade.gradebook import Gradebook, GradingCriterion
from edugrade.grading import BatchGrader, GradingError, RubricParser
from edugrade.libs.config_loader import get_config, load_all_configs

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
LOG = logging.getLogger(__name__)


def main():
    """Main entry point for grade-batch command."""
    parser = argparse.ArgumentParser(
        description='Grade the ungraded submissions of an assignment with a language model',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Grade everything not yet graded
  grade-batch --assignment essay-1

  # Replace the assignment's criteria with a markdown rubric first
  grade-batch --assignment essay-1 --rubric rubric.md

  # Regrade every submission with a specific model and more concurrency
  grade-batch --assignment essay-1 --regrade --model deepseek-reasoner --max-threads 8
        """
    )

    parser.add_argument(
        '--assignment', '-a',
        required=True,
        help='Assignment id'
    )
    parser.add_argument(
        '--gradebook', '-g',
        type=Path,
        default=None,
        help='Path to the gradebook YAML file (default: gradebook.path from config)'
    )
    parser.add_argument(
        '--rubric', '-r',
        type=Path,
        default=None,
        help='Markdown rubric that replaces the assignment criteria'
    )
    parser.add_argument(
        '--model', '-m',
        type=str,
        default=None,
        help='Model to use (overrides config value)'
    )
    parser.add_argument(
        '--max-threads', '-t',
        type=int,
        default=None,
        help='Maximum number of concurrent grading tasks (overrides config value)'
    )
    parser.add_argument(
        '--regrade',
        action='store_true',
        help='Also grade submissions that already have a grade'
    )
    parser.add_argument(
        '--continue-on-error',
        action='store_true',
        help='Continue grading even if some submissions fail'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = load_all_configs()
    except Exception as e:
        LOG.error(f"Failed to load configuration: {e}")
        sys.exit(1)

    gradebook_path = args.gradebook or Path(get_config("gradebook.path", config, default="gradebook.yaml"))
    if not gradebook_path.is_file():
        LOG.error(f"Gradebook does not exist: {gradebook_path}")
        sys.exit(1)
    gradebook = Gradebook(gradebook_path)
    if gradebook.get_assignment(args.assignment) is None:
        LOG.error(f"Assignment not found: {args.assignment}")
        sys.exit(1)

    if args.rubric:
        try:
            specs = RubricParser().parse_file(args.rubric)
        except ValueError as e:
            LOG.error(f"Failed to parse rubric: {e}")
            sys.exit(1)
        gradebook.set_criteria(args.assignment, [
            GradingCriterion(id='', assignment_id=args.assignment, name=s.name,
                             max_points=s.max_points, description=s.description, weight=s.weight)
            for s in specs
        ])
        LOG.info(f"Using rubric {args.rubric} with {len(specs)} criteria")

    try:
        batch_grader = BatchGrader(
            configs=config,
            model=args.model,
            max_concurrent=args.max_threads
        )
    except Exception as e:
        LOG.error(f"Failed to initialize batch grader: {e}")
        sys.exit(1)

    try:
        results = batch_grader.grade_assignment(
            gradebook,
            args.assignment,
            regrade=args.regrade,
            continue_on_error=args.continue_on_error
        )
    except (GradingError, LookupError) as e:
        LOG.error(f"Batch grading failed: {e}")
        gradebook.save()
        sys.exit(1)

    gradebook.save()

    if not results:
        print("No submissions needed grading.")
        return

    successful = [r for r in results if r.success]
    failed = [r for r in results if not r.success]

    print(f"\n{'='*60}")
    print(f"Batch Grading Complete")
    print(f"{'='*60}")
    print(f"Total submissions: {len(results)}")
    print(f"Successfully graded: {len(successful)}")
    print(f"Failed: {len(failed)}")

    if successful:
        print(f"\nScores:")
        for result in successful:
            pct = result.total_score / result.max_score * 100 if result.max_score else 0
            print(f"  {result.student_name}: {result.total_score:.1f}/{result.max_score:.0f} ({pct:.1f}%)")

    if failed:
        print(f"\nFailed submissions:")
        for result in failed:
            print(f"  {result.student_name}: {result.error_message}")

    print(f"\nGradebook saved to: {gradebook_path}")

    if failed and not args.continue_on_error:
        sys.exit(1)


if __name__ == "__main__":
    main()
