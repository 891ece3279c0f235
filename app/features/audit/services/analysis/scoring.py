import math
from typing import Iterable

from app.features.audit.schemas.audit import CATEGORIES, CategoryScore, CategoryScores, Issue

MAX_SCORE = 100

IMPACT_PENALTIES = {
    "high": 20,
    "medium": 10,
    "low": 5,
}


def calculate_category_scores(issues: Iterable[Issue]) -> CategoryScores:
    """
    Start every category at 100 and subtract the impact penalty of each issue
    in that category, flooring at 0 after every subtraction.
    """
    scores = {name: MAX_SCORE for name in CATEGORIES}
    grouped = {name: [] for name in CATEGORIES}

    for issue in issues:
        grouped[issue.category].append(issue)
        scores[issue.category] = max(0, scores[issue.category] - IMPACT_PENALTIES[issue.impact])

    return CategoryScores(**{
        name: CategoryScore(score=scores[name], max_score=MAX_SCORE, issues=grouped[name])
        for name in CATEGORIES
    })


def calculate_overall_score(categories: CategoryScores) -> int:
    """Mean of the four category scores, rounded half up."""
    scores = [category.score for category in categories.as_list()]
    return int(math.floor(sum(scores) / len(scores) + 0.5))
