"""Version: 0.1.0
License: MIT
"""

from __future__ import annotations

from .models import (
    DecisionCategory,
    Direction,
    DistanceCategory,
    Guidance,
    NavigationDecision,
    SpeechPriority,
)


class Localization:
    MESSAGES: dict[str, dict[str, str]] = {
        "en": {
            "decision.STOP": "{label} ahead of you, stop",
            "decision.STEP_LEFT": "{label} ahead of you, move left",
            "decision.STEP_RIGHT": "{label} ahead of you, move right",
            "decision.GO_STRAIGHT": "{label} ahead of you, move straight",
            "path_clear": "path clear, move straight",
            "direction.left": "to your left",
            "direction.center": "ahead",
            "direction.right": "to your right",
            "distance.very_close": "very close, stop",
            "distance.close": "close, slow down",
            "distance.medium": "approaching",
            "distance.far": "in the distance",
            "guidance": "{label} {direction}, {distance}",
            "closest_object": "{label}, about {distance:.1f} meters {direction}",
        },
        "de": {
            "decision.STOP": "{label} vor dir, stehen bleiben",
            "decision.STEP_LEFT": "{label} vor dir, nach links ausweichen",
            "decision.STEP_RIGHT": "{label} vor dir, nach rechts ausweichen",
            "decision.GO_STRAIGHT": "{label} vor dir, geradeaus weitergehen",
            "path_clear": "Weg frei, geradeaus weitergehen",
            "direction.left": "links von dir",
            "direction.center": "vor dir",
            "direction.right": "rechts von dir",
            "distance.very_close": "sehr nah, stehen bleiben",
            "distance.close": "nah, langsamer gehen",
            "distance.medium": "kommt näher",
            "distance.far": "in der Ferne",
            "guidance": "{label} {direction}, {distance}",
            "closest_object": "{label}, etwa {distance:.1f} Meter {direction}",
        },
    }

    @classmethod
    def t(cls, lang: str, key: str, **fields: object) -> str:
        template = cls.MESSAGES.get(lang, cls.MESSAGES["en"]).get(key)
        if template is None:
            template = cls.MESSAGES["en"].get(key, key)
        return template.format(**fields) if fields else template


def is_urgent(decision: NavigationDecision) -> bool:
    return decision == NavigationDecision.STOP


def decision_category(decision: NavigationDecision | None) -> DecisionCategory | None:
    if decision is None:
        return None
    if decision in (NavigationDecision.STEP_LEFT, NavigationDecision.STEP_RIGHT):
        return DecisionCategory.LATERAL
    if decision == NavigationDecision.STOP:
        return DecisionCategory.STOP
    return DecisionCategory.STRAIGHT


def decision_priority(decision: NavigationDecision) -> SpeechPriority:
    return SpeechPriority.URGENT if is_urgent(decision) else SpeechPriority.NAVIGATION


def decision_text(decision: NavigationDecision, label: str, lang: str = "en") -> str:
    return Localization.t(lang, f"decision.{decision.value}", label=label)


def path_clear_text(lang: str = "en") -> str:
    return Localization.t(lang, "path_clear")


def direction_phrase(direction: Direction, lang: str = "en") -> str:
    return Localization.t(lang, f"direction.{direction.value}")


def guidance_text(guidance: Guidance, lang: str = "en") -> str:
    return Localization.t(
        lang,
        "guidance",
        label=guidance.label,
        direction=direction_phrase(guidance.direction, lang),
        distance=Localization.t(lang, f"distance.{guidance.distance_category.value}"),
    )


def guidance_priority(category: DistanceCategory) -> SpeechPriority:
    if category == DistanceCategory.VERY_CLOSE:
        return SpeechPriority.URGENT
    return SpeechPriority.NAVIGATION


def closest_object_text(label: str, distance_m: float, direction: Direction, lang: str = "en") -> str:
    return Localization.t(
        lang,
        "closest_object",
        label=label,
        distance=distance_m,
        direction=direction_phrase(direction, lang),
    )
