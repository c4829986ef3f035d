"""Parser for grading rubrics written in markdown."""

import re
from pathlib import Path
from typing import Dict, List

from .models import CriterionSpec

_NAME_KEYWORDS = ('criterion', 'criteria', 'component', 'category', 'name')
_POINTS_KEYWORDS = ('point', 'score', 'max')
_WEIGHT_KEYWORDS = ('weight',)
_DESCRIPTION_KEYWORDS = ('description', 'requirement', 'details')

_NUMBER = re.compile(r'(\d+(?:\.\d+)?)')
_LIST_ITEM = re.compile(
    r'^[-*][ \t]+([^(\[\n]+?)[ \t]*[\(\[](\d+(?:\.\d+)?)[ \t]*(?:points?|pts?)'
    r'(?:[ \t]*,[ \t]*(\d+)[ \t]*%)?[\)\]][ \t]*[:-]?[ \t]*(.*)$',
    re.MULTILINE,
)


class RubricParser:
    """Turn a markdown rubric into grading criteria."""

    def parse_file(self, rubric_path: Path) -> List[CriterionSpec]:
        """Parse a rubric markdown file."""
        try:
            content = Path(rubric_path).read_text(encoding='utf-8')
        except OSError as e:
            raise ValueError(f"Could not read rubric file: {e}")
        return self.parse(content)

    def parse(self, content: str) -> List[CriterionSpec]:
        """
        Parse markdown content into criteria.

        Two layouts are understood:
        1. A table with Criterion | Points columns and optional Weight and
           Description columns
        2. Bullet lists such as ``- Thesis (10 points, 40%): Clear argument``

        Raises:
            ValueError: If neither layout yields any criteria
        """
        criteria = self._parse_table(content) or self._parse_list(content)
        if not criteria:
            raise ValueError(
                "Could not parse rubric. Use a table with Criterion|Points columns "
                "or bullets like '- Criterion (N points): description'"
            )
        return criteria

    @staticmethod
    def _column_indices(cells: List[str]) -> Dict[str, int]:
        indices = {}
        for i, cell in enumerate(cells):
            lowered = cell.lower()
            if 'name' not in indices and any(k in lowered for k in _NAME_KEYWORDS) \
                    and not any(k in lowered for k in _DESCRIPTION_KEYWORDS):
                indices['name'] = i
            elif any(k in lowered for k in _WEIGHT_KEYWORDS):
                indices['weight'] = i
            elif any(k in lowered for k in _POINTS_KEYWORDS):
                indices['points'] = i
            elif any(k in lowered for k in _DESCRIPTION_KEYWORDS):
                indices['description'] = i
        return indices

    def _parse_table(self, content: str) -> List[CriterionSpec]:
        criteria = []
        indices: Dict[str, int] = {}

        for line in content.split('\n'):
            line = line.strip()
            if '|' not in line or all(c in '|-: ' for c in line):
                continue

            cells = [c.strip() for c in line.strip('|').split('|')]

            if not indices:
                found = self._column_indices(cells)
                if 'name' in found and 'points' in found:
                    indices = found
                continue

            if len(cells) <= max(indices.values()):
                continue

            points_match = _NUMBER.search(cells[indices['points']])
            if not points_match:
                continue

            name = cells[indices['name']].replace('*', '').strip()
            if name.lower() in ('total', 'sum'):
                continue

            weight = 25
            if 'weight' in indices:
                weight_match = _NUMBER.search(cells[indices['weight']])
                if weight_match:
                    weight = int(float(weight_match.group(1)))

            description = cells[indices['description']] if 'description' in indices else None
            criteria.append(CriterionSpec(
                name=name,
                max_points=float(points_match.group(1)),
                weight=weight,
                description=description or None,
            ))

        return criteria

    def _parse_list(self, content: str) -> List[CriterionSpec]:
        criteria = []
        for match in _LIST_ITEM.finditer(content):
            name, points, weight, description = match.groups()
            criteria.append(CriterionSpec(
                name=name.strip(),
                max_points=float(points),
                weight=int(weight) if weight else 25,
                description=description.strip() or None,
            ))
        return criteria
