"""
Marketing insight rules for segmentation clusters.

Turns each cluster profile into one recommendation sentence using
deterministic threshold rules. No ML or DB access.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import List, Sequence

from segmentation.schema import ClusterProfile


_BUSINESS_RULES_PATH = Path(__file__).resolve().parents[1] / "config" / "business_rules.json"


@lru_cache(maxsize=1)
def _load_business_rules() -> dict:
    try:
        raw = _BUSINESS_RULES_PATH.read_text(encoding="utf-8")
        data = json.loads(raw)
        return data if isinstance(data, dict) else {}
    except (OSError, ValueError, TypeError):
        return {}


def _as_dict(value: object) -> dict:
    return value if isinstance(value, dict) else {}


def _as_float(value: object, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


_INSIGHT_THRESHOLDS = _as_dict(
    _as_dict(_as_dict(_load_business_rules().get("segmentation")).get("insights")).get("thresholds")
)


# ------------------------------------------------------------------
# Thresholds (income in k$, spending score 1-100, age in years)
# ------------------------------------------------------------------

_PREMIUM_INCOME_MIN: float = _as_float(_INSIGHT_THRESHOLDS.get("premium_income_min"), 80.0)
_PREMIUM_SPENDING_MIN: float = _as_float(_INSIGHT_THRESHOLDS.get("premium_spending_min"), 70.0)
_BUDGET_INCOME_MAX: float = _as_float(_INSIGHT_THRESHOLDS.get("budget_income_max"), 40.0)
_BUDGET_SPENDING_MAX: float = _as_float(_INSIGHT_THRESHOLDS.get("budget_spending_max"), 40.0)
_YOUNG_AGE_MAX: float = _as_float(_INSIGHT_THRESHOLDS.get("young_age_max"), 30.0)
_YOUNG_SPENDING_MIN: float = _as_float(_INSIGHT_THRESHOLDS.get("young_spending_min"), 60.0)
_MATURE_AGE_MIN: float = _as_float(_INSIGHT_THRESHOLDS.get("mature_age_min"), 50.0)
_MATURE_SPENDING_MAX: float = _as_float(_INSIGHT_THRESHOLDS.get("mature_spending_max"), 50.0)

# ------------------------------------------------------------------
# Recommendations
# ------------------------------------------------------------------

_TEXT_PREMIUM = (
    "Premium customers with high income and spending - target with luxury "
    "products and exclusive offers."
)
_TEXT_BUDGET = (
    "Price-sensitive segment - focus on value propositions and discount campaigns."
)
_TEXT_YOUNG = (
    "Young high spenders - target with trendy products and social media marketing."
)
_TEXT_MATURE = (
    "Mature conservative spenders - emphasize quality and reliability in marketing."
)
_TEXT_DEFAULT = (
    "Balanced segment - use diversified marketing approach with moderate pricing."
)


class InsightGenerator:
    """
    Produces one marketing recommendation per cluster.

    Rules are evaluated in priority order against the cluster's raw
    (unrounded) averages; the first match wins.
    """

    def generate(self, profiles: Sequence[ClusterProfile]) -> List[str]:
        """
        Build the insight sentences for ``profiles``, in the same order.

        Each sentence is prefixed with the profile's description.
        """
        return [
            f"{profile.description or f'Cluster {profile.cluster}'}: {self._recommend(profile)}"
            for profile in profiles
        ]

    @staticmethod
    def _recommend(profile: ClusterProfile) -> str:
        """
        Priority:
            1. Premium (high income and high spending)
            2. Budget (low income and low spending)
            3. Young spenders
            4. Mature savers
            5. Balanced (fallback)
        """
        income = profile.avg_income
        spending = profile.avg_spending
        age = profile.avg_age

        if income > _PREMIUM_INCOME_MIN and spending > _PREMIUM_SPENDING_MIN:
            return _TEXT_PREMIUM

        if income < _BUDGET_INCOME_MAX and spending < _BUDGET_SPENDING_MAX:
            return _TEXT_BUDGET

        if age < _YOUNG_AGE_MAX and spending > _YOUNG_SPENDING_MIN:
            return _TEXT_YOUNG

        if age > _MATURE_AGE_MIN and spending < _MATURE_SPENDING_MAX:
            return _TEXT_MATURE

        return _TEXT_DEFAULT
