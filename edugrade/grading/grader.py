"""Language-model grader for submissions, using pydantic-ai."""

import asyncio
import json
import logging
import math
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from edugrade.libs.config_loader import ConfigType
from edugrade.libs.llm import create_agent, extract_output
from .models import AIGradingResult, CriterionSpec, GradingError

LOG = logging.getLogger(__name__)

GRADING_SYSTEM_PROMPT = (
    "You are an expert educational grader. Provide fair, constructive, and detailed "
    "feedback on student submissions. Always respond with valid JSON in the requested format."
)
FEEDBACK_SYSTEM_PROMPT = (
    "You are a helpful educational assistant. Provide constructive feedback on student submissions."
)
DEFAULT_FEEDBACK = "No feedback provided."
UNREADABLE_FILE = "Error loading file content"


def read_submission_content(paths: Sequence[Path]) -> str:
    """
    Read the text handed to the grader.

    A single file is used verbatim; several files are concatenated, each
    under a ``--- File: <name> ---`` header. Files that cannot be read are
    replaced by an error marker rather than aborting the whole submission.
    """
    if len(paths) == 1:
        return Path(paths[0]).read_text(encoding='utf-8', errors='ignore')

    parts = []
    for path in map(Path, paths):
        try:
            content = path.read_text(encoding='utf-8', errors='ignore')
        except OSError as e:
            LOG.error(f"Error reading submission file {path}: {e}")
            content = UNREADABLE_FILE
        parts.append(f"\n--- File: {path.name} ---\n{content}")
    return '\n\n'.join(parts)


class SubmissionGrader:
    """Grade submissions against a rubric with one model request each."""

    def __init__(self, configs: ConfigType,
                 model: Optional[str] = None, settings: Optional[Dict[str, Any]] = None):
        """
        Initialize the grader.

        Args:
            configs: Configuration dictionary (required)
            model: Model to use (overrides config value)
            settings: Pydantic AI settings dict (overrides config values)
        """
        self.configs = configs
        self.model_name = model
        self.settings = settings

        self.agent = create_agent(
            configs=configs,
            model=model,
            settings_dict=settings,
            system_prompt=GRADING_SYSTEM_PROMPT,
        )
        self._feedback_agent = None

    def build_prompt(self, submission: str, assignment_title: str,
                     criteria: List[CriterionSpec], max_total_points: float) -> str:
        """Build the grading prompt."""
        criteria_text = "\n".join(
            f"- {c.name} ({c.max_points:g} points, {c.weight}% weight): "
            f"{c.description or 'No description provided'}"
            for c in criteria
        )
        score_lines = ",\n".join(f'    "{c.name}": score' for c in criteria)

        return f"""You are an expert educational grader. Please grade the following student submission based on the provided criteria.

Assignment: {assignment_title}
Max Total Points: {max_total_points:g}

Grading Criteria:
{criteria_text}

Student Submission:
{submission}

Please provide a detailed grading with scores for each criterion and overall feedback. Be constructive and specific in your feedback, highlighting both strengths and areas for improvement.

Respond with JSON in this exact format:
{{
  "totalScore": number,
  "maxScore": number,
  "criteriaScores": {{
{score_lines}
  }},
  "feedback": "detailed feedback string",
  "suggestions": ["suggestion1", "suggestion2"]
}}"""

    def parse_response(self, response_text: str, max_total_points: float) -> AIGradingResult:
        """
        Turn the model's reply into a sanitised result.

        Raises:
            GradingError: If the reply holds no JSON object
        """
        json_match = re.search(r'{.*}', response_text, re.DOTALL)
        if not json_match:
            raise GradingError("Model response did not contain JSON")
        try:
            data = json.loads(json_match.group())
        except json.JSONDecodeError as e:
            raise GradingError(f"Model response was not valid JSON: {e}")

        try:
            total = float(data.get('totalScore') or 0)
        except (TypeError, ValueError):
            total = 0.0
        if not math.isfinite(total):
            LOG.warning(f"Ignoring non-finite total score: {total}")
            total = 0.0

        criteria_scores = {}
        raw_scores = data.get('criteriaScores')
        if isinstance(raw_scores, dict):
            for name, score in raw_scores.items():
                try:
                    value = float(score)
                except (TypeError, ValueError):
                    LOG.warning(f"Ignoring non-numeric score for criterion {name!r}: {score!r}")
                    continue
                if not math.isfinite(value):
                    LOG.warning(f"Ignoring non-finite score for criterion {name!r}: {value}")
                    continue
                criteria_scores[name] = value

        suggestions = data.get('suggestions')
        return AIGradingResult(
            total_score=max(0.0, min(float(max_total_points), total)),
            max_score=max_total_points,
            criteria_scores=criteria_scores,
            feedback=data.get('feedback') or DEFAULT_FEEDBACK,
            suggestions=[str(s) for s in suggestions] if isinstance(suggestions, list) else [],
        )

    async def grade_async(self, submission_content: str, assignment_title: str,
                          criteria: List[CriterionSpec], max_total_points: float) -> AIGradingResult:
        """
        Grade a submission asynchronously.

        Args:
            submission_content: The student's submission text
            assignment_title: Title shown to the model
            criteria: Rubric criteria to evaluate against
            max_total_points: Points the assignment is out of

        Returns:
            AIGradingResult with scores and feedback

        Raises:
            GradingError: If the request fails or the reply cannot be parsed
        """
        prompt = self.build_prompt(submission_content, assignment_title, criteria, max_total_points)
        try:
            result = await self.agent.run(prompt)
        except Exception as e:
            LOG.error(f"Error grading submission: {e}")
            raise GradingError(f"Failed to grade submission with AI: {e}") from e

        return self.parse_response(extract_output(result), max_total_points)

    def grade(self, submission_content: str, assignment_title: str,
              criteria: List[CriterionSpec], max_total_points: float) -> AIGradingResult:
        """Synchronous wrapper around grade_async."""
        return asyncio.run(
            self.grade_async(submission_content, assignment_title, criteria, max_total_points)
        )

    async def generate_feedback_async(self, submission_content: str, assignment_title: str) -> str:
        """Free-form feedback for a submission, without scoring."""
        if self._feedback_agent is None:
            self._feedback_agent = create_agent(
                configs=self.configs,
                model=self.model_name,
                settings_dict={'temperature': 0.5},
                system_prompt=FEEDBACK_SYSTEM_PROMPT,
            )
        prompt = (f"Please provide detailed, constructive feedback for this "
                  f"{assignment_title} submission:\n\n{submission_content}")
        try:
            result = await self._feedback_agent.run(prompt)
        except Exception as e:
            LOG.error(f"Error generating feedback: {e}")
            raise GradingError(f"Failed to generate feedback: {e}") from e

        feedback = extract_output(result).strip()
        return feedback or "No feedback could be generated."
