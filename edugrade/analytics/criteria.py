"""Per-criterion performance for an assignment."""

from typing import Any, Dict, List, Sequence

from edugrade.gradebook.models import Grade, GradingCriterion
from .engine import round_half_up


def criteria_performance(criteria: Sequence[GradingCriterion],
                         grades: Sequence[Grade]) -> List[Dict[str, Any]]:
    """
    Average percentage earned on each rubric criterion.

    Only grades that scored the criterion count toward its average; a score of
    zero counts, a missing score does not.
    """
    performance = []
    for criterion in criteria:
        percentages = []
        if criterion.max_points > 0:
            for grade in grades:
                score = (grade.criteria_scores or {}).get(criterion.name)
                if score is not None:
                    percentages.append(score / criterion.max_points * 100)

        performance.append({
            'id': criterion.id,
            'name': criterion.name,
            'averageScore': int(round_half_up(sum(percentages) / len(percentages))) if percentages else None,
            'maxPoints': criterion.max_points,
            'weight': criterion.weight,
            'graded': len(percentages),
        })
    return performance
