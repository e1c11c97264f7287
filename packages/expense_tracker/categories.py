"""Static category enumeration.

The tracker uses a fixed set of 14 categories. Each category is stored by its
plain name (``"Food and Groceries"``) and displayed with an emoji prefix
(``"🍔 Food and Groceries"``). The set is process-wide configuration and is not
editable at runtime.
"""

from __future__ import annotations

from enum import StrEnum


class Category(StrEnum):
    FOOD = "Food and Groceries"
    TRANSPORTATION = "Transportation"
    RENT = "Rent and Household"
    UTILITIES = "Utilities and Bills"
    PHONE = "Phone Recharge and Internet"
    EDUCATION = "Education Fees and Books"
    STATIONERY = "Stationery and Supplies"
    HEALTHCARE = "Healthcare and Medicines"
    PERSONAL_CARE = "Personal Care and Grooming"
    CLOTHING = "Clothing and Accessories"
    ENTERTAINMENT = "Entertainment and Subscriptions"
    GIFTS = "Gifts and Donations"
    SAVINGS = "Savings and Investments"
    MISCELLANEOUS = "Miscellaneous/Others"

    @property
    def label(self) -> str:
        """Display label with the emoji prefix."""

        return f"{_EMOJI[self]} {self.value}"


_EMOJI: dict[Category, str] = {
    Category.FOOD: "🍔",
    Category.TRANSPORTATION: "🚗",
    Category.RENT: "🏠",
    Category.UTILITIES: "🧾",
    Category.PHONE: "📱",
    Category.EDUCATION: "🎓",
    Category.STATIONERY: "🖊️",
    Category.HEALTHCARE: "💊",
    Category.PERSONAL_CARE: "🪒",
    Category.CLOTHING: "👕",
    Category.ENTERTAINMENT: "🎬",
    Category.GIFTS: "🎁",
    Category.SAVINGS: "💰",
    Category.MISCELLANEOUS: "🤷‍♂️",
}

CATEGORY_LABELS: tuple[str, ...] = tuple(c.label for c in Category)


def _lookup_table() -> dict[str, Category]:
    table: dict[str, Category] = {}
    for c in Category:
        table[c.value.lower()] = c
        table[c.label.lower()] = c
        table[c.name.lower()] = c
    return table


_LOOKUP = _lookup_table()


def parse_category(raw: str | Category) -> Category:
    """Resolve a plain name, emoji label, or member name to a :class:`Category`.

    Matching is case-insensitive and ignores surrounding whitespace. Raises
    ``ValueError`` for anything outside the fixed set.
    """

    if isinstance(raw, Category):
        return raw
    key = " ".join(str(raw).split()).lower()
    try:
        return _LOOKUP[key]
    except KeyError:
        raise ValueError(f"unknown category: {raw!r}") from None


__all__ = ["Category", "CATEGORY_LABELS", "parse_category"]
