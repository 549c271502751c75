from __future__ import annotations

from dataclasses import dataclass

CATEGORIES: tuple[str, ...] = (
    "JavaScript",
    "React",
    "Python",
    "Node.js",
    "DSA",
    "MongoDB",
    "AI",
    "Development",
    "Cloud",
    "System Design",
)
DIFFICULTIES: tuple[str, ...] = ("Easy", "Medium", "Hard")

_DEFAULT_ICON = "📚"
_ICONS = {
    "JavaScript": "🟨",
    "React": "⚛️",
    "Python": "🐍",
    "Node.js": "🟢",
    "DSA": "🧮",
    "MongoDB": "🍃",
    "AI": "🤖",
    "Development": "💻",
}

# Shown when the store has no questions or cannot be reached.
_FALLBACK_PROFILE: tuple[tuple[str, int, tuple[str, ...]], ...] = (
    ("JavaScript", 5, ("Easy", "Medium", "Hard")),
    ("React", 5, ("Easy", "Medium", "Hard")),
    ("Python", 4, ("Easy", "Medium", "Hard")),
    ("Node.js", 3, ("Easy", "Medium", "Hard")),
    ("DSA", 4, ("Easy", "Medium", "Hard")),
    ("MongoDB", 2, ("Easy", "Medium")),
    ("AI", 3, ("Easy", "Medium", "Hard")),
)


@dataclass(frozen=True)
class CategorySummary:
    name: str
    question_count: int
    difficulties: tuple[str, ...]
    icon: str


def icon_for(category: str) -> str:
    return _ICONS.get(category, _DEFAULT_ICON)


def is_known_category(category: str) -> bool:
    return category in CATEGORIES


def fallback_categories() -> list[CategorySummary]:
    return [
        CategorySummary(name=name, question_count=count, difficulties=difficulties, icon=icon_for(name))
        for name, count, difficulties in _FALLBACK_PROFILE
    ]


def fallback_question_total() -> int:
    return sum(count for _, count, _ in _FALLBACK_PROFILE)
