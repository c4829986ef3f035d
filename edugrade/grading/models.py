"""Pydantic models for AI grading requests and results."""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class GradingError(Exception):
    """Grading a submission with the language model failed."""


class CriterionSpec(BaseModel):
    """Single rubric criterion handed to the model."""
    name: str = Field(description="Name of the grading criterion")
    max_points: float = Field(description="Maximum points for this criterion")
    weight: int = Field(default=25, description="Weight of the criterion, in percent")
    description: Optional[str] = Field(default=None, description="What is being evaluated")


class AIGradingResult(BaseModel):
    """Grade returned by the model after sanitising."""
    total_score: float = Field(description="Total points earned, within [0, max_score]")
    max_score: float = Field(description="Maximum possible total points")
    criteria_scores: Dict[str, float] = Field(
        default_factory=dict,
        description="Points per criterion, keyed by criterion name"
    )
    feedback: str = Field(description="Overall feedback for the student")
    suggestions: List[str] = Field(default_factory=list, description="Suggestions for improvement")

    def to_dict(self) -> dict:
        """Camel-cased dictionary for the dashboard."""
        return {
            'totalScore': self.total_score,
            'maxScore': self.max_score,
            'criteriaScores': dict(self.criteria_scores),
            'feedback': self.feedback,
            'suggestions': list(self.suggestions),
        }


class MissingCriteriaError(GradingError):
    """The assignment has no grading criteria to grade against."""
