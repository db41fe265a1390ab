from __future__ import annotations

from enum import Enum
from typing import Dict, List, Tuple


class Category(str, Enum):
    """Closed set of inbox categories."""

    TO_RESPOND = "To Respond"
    AWAITING_REPLY = "Awaiting Reply"
    IMPORTANT = "Important"
    FYI = "FYI"
    MARKETING = "Marketing"
    UPDATES = "Updates"
    PROMOTIONS = "Promotions"

    @property
    def color(self) -> str:
        return CATEGORY_COLORS[self]

    @property
    def suggested_actions(self) -> List[str]:
        return list(SUGGESTED_ACTIONS.get(self, DEFAULT_ACTIONS))

    @classmethod
    def parse(cls, value: str) -> "Category":
        """Resolve a label (case-insensitive) to a Category, or raise ValueError."""
        if isinstance(value, Category):
            return value
        needle = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == needle or member.name.lower() == needle:
                return member
        raise ValueError(f"Unknown category: {value!r}")


# Tailwind classes consumed by the inbox UI.
CATEGORY_COLORS: Dict[Category, str] = {
    Category.TO_RESPOND: "bg-red-500",
    Category.AWAITING_REPLY: "bg-orange-500",
    Category.IMPORTANT: "bg-yellow-500",
    Category.FYI: "bg-blue-500",
    Category.MARKETING: "bg-purple-500",
    Category.PROMOTIONS: "bg-green-500",
    Category.UPDATES: "bg-indigo-500",
}

SUGGESTED_ACTIONS: Dict[Category, Tuple[str, ...]] = {
    Category.TO_RESPOND: (
        "Reply within 24 hours",
        "Set follow-up reminder",
        "Mark as high priority",
    ),
    Category.IMPORTANT: (
        "Review immediately",
        "Add to task list",
        "Archive after action",
    ),
    Category.MARKETING: (
        "Unsubscribe if unwanted",
        "Move to promotions",
        "Auto-archive future emails",
    ),
    Category.UPDATES: (
        "Read when convenient",
        "Auto-archive after 7 days",
        "Create filter rule",
    ),
    Category.PROMOTIONS: (
        "Check if still valid",
        "Save coupon codes",
        "Unsubscribe if too frequent",
    ),
}

DEFAULT_ACTIONS: Tuple[str, ...] = ("Review and categorize", "Archive if not relevant")
