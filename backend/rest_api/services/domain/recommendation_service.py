"""
Recommendation Domain Service.

Rule-based suggestions from the diner's health profile. Each rule that an
item satisfies adds a reason worth one point; items among the most ordered
get an extra "Popular choice" reason worth half a point. Anything containing
one of the diner's allergens is never suggested.
"""

from dataclasses import dataclass
from typing import Any, Callable

from sqlalchemy import select
from sqlalchemy.orm import Session

from shared.config.constants import Limits, Roles
from shared.config.logging import get_logger
from shared.utils.exceptions import ForbiddenError, ValidationError
from rest_api.models import MenuItem, User

from .menu_service import MenuService
from .reporting_service import ReportingService

logger = get_logger(__name__)

ANIMAL_ALLERGENS = frozenset({"dairy", "eggs", "fish", "shellfish"})
POPULAR_REASON = {"text": "Popular choice", "type": "popular"}
POPULAR_SCORE = 0.5


@dataclass(frozen=True)
class Rule:
    name: str
    reason: str
    kind: str
    matches: Callable[[dict[str, Any], list[str]], bool]


def _nutrient(nutrition: dict[str, Any], name: str) -> float:
    return float(nutrition.get(name) or 0)


RULES: dict[str, Rule] = {
    rule.name: rule
    for rule in (
        Rule("High Protein", "High in protein", "health",
             lambda n, a: _nutrient(n, "protein") >= 25),
        Rule("Muscle Gain", "Supports muscle gain", "health",
             lambda n, a: _nutrient(n, "protein") >= 30),
        Rule("Weight Loss", "Lower in calories", "health",
             lambda n, a: _nutrient(n, "calories") <= 500),
        Rule("Low Sodium", "Low in sodium", "health",
             lambda n, a: _nutrient(n, "sodium") <= 600),
        Rule("Keto", "Low in carbs", "health",
             lambda n, a: _nutrient(n, "carbs") <= 15),
        Rule("Vegan", "Free of animal products", "dietary",
             lambda n, a: not ANIMAL_ALLERGENS & {x.lower() for x in a}),
    )
}


def score_item(
    item: MenuItem,
    goals: list[str],
    dietary_plan: str,
    popular_ids: set[int],
) -> tuple[float, list[dict[str, str]]]:
    nutrition = item.nutrition_per_serving or {}
    allergens = list(item.allergens or [])
    reasons: list[dict[str, str]] = []

    wanted = [g for g in goals if g in RULES]
    if dietary_plan in RULES and dietary_plan not in wanted:
        wanted.append(dietary_plan)

    for name in wanted:
        rule = RULES[name]
        if rule.matches(nutrition, allergens):
            kind = "dietary" if name == dietary_plan else rule.kind
            reasons.append({"text": rule.reason, "type": kind})

    score = float(len(reasons))
    if item.id in popular_ids:
        reasons.append(dict(POPULAR_REASON))
        score += POPULAR_SCORE
    return score, reasons


class RecommendationService:
    def __init__(self, db: Session):
        self._db = db

    def _available_items(self) -> list[MenuItem]:
        return list(
            self._db.scalars(
                select(MenuItem)
                .where(MenuItem.is_active.is_(True), MenuItem.is_available.is_(True))
                .order_by(MenuItem.id)
            ).all()
        )

    def personalized(self, ctx: dict[str, Any], limit: int = Limits.MAX_RECOMMENDATIONS) -> list[dict[str, Any]]:
        """
        Raises:
            ForbiddenError: caller is not a customer
            ValidationError: no health profile yet
        """
        if ctx.get("role") != Roles.CUSTOMER:
            raise ForbiddenError("get personalized recommendations", user_id=ctx.get("user_id"))
        user = self._db.get(User, ctx["user_id"])
        if user is None or not user.health_profile_created:
            raise ValidationError("Create a health profile to get recommendations")

        blocked = {a.lower() for a in user.allergies or []}
        popular_ids = {p["menu_item_id"] for p in ReportingService(self._db).popular_items()}

        scored = []
        for item in self._available_items():
            if blocked & {a.lower() for a in item.allergens or []}:
                continue
            score, reasons = score_item(item, list(user.health_goals or []), user.dietary_plan, popular_ids)
            if score > 0:
                scored.append({**MenuService.to_dict(item), "score": score, "reasons": reasons})

        scored.sort(key=lambda r: -r["score"])
        logger.debug("Recommendations computed", user_id=user.id, candidates=len(scored))
        return scored[:limit]

    def popular(self, limit: int = Limits.MAX_RECOMMENDATIONS) -> list[dict[str, Any]]:
        """Most ordered items that are still available; falls back to the menu when nothing was ordered."""
        available = {item.id: item for item in self._available_items()}
        ranked = [
            available[p["menu_item_id"]]
            for p in ReportingService(self._db).popular_items(limit=len(available) or limit)
            if p["menu_item_id"] in available
        ]
        if not ranked:
            ranked = list(available.values())
        return [
            {**MenuService.to_dict(item), "score": POPULAR_SCORE, "reasons": [dict(POPULAR_REASON)]}
            for item in ranked[:limit]
        ]
