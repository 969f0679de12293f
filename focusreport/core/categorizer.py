"""Application categorizer for FocusReport.

Maps an application identifier (and, for title-sensitive apps such as
browsers, the window title) to a productivity Category.  Classification
data is injected as CategoryRules so deployments and tests can supply
their own lists.

Two strategies are used: a lookup table over the per-category identifier
sets, and a title-keyword handler registered for the title-sensitive
identifiers.  ``Categorizer.category`` never raises; identifiers absent
from every set resolve to ``Category.UNKNOWN``.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from focusreport.core.models import Category, CategoryRules


class CategoryStrategy(ABC):
    """One way of turning an identifier (and maybe a title) into a Category."""

    @abstractmethod
    def classify(self, app_identifier: str, window_title: Optional[str]) -> Category:
        pass


class BaseCategoryStrategy(CategoryStrategy):
    """Static identifier -> Category lookup."""

    def __init__(self, rules: CategoryRules) -> None:
        self._table: dict[str, Category] = {}
        # Reverse order so that deep work wins when an id is in several sets.
        for ids, category in (
            (rules.distraction, Category.DISTRACTION),
            (rules.shallow_work, Category.SHALLOW_WORK),
            (rules.deep_work, Category.DEEP_WORK),
        ):
            for app_id in ids:
                self._table[app_id] = category

    def classify(self, app_identifier: str, window_title: Optional[str]) -> Category:
        return self._table.get(app_identifier, Category.UNKNOWN)


class TitleCategoryStrategy(CategoryStrategy):
    """Keyword scan over the window title of a title-sensitive app.

    Distraction keywords are checked before productive ones.  Anything
    that matches neither list, including a missing or empty title,
    counts as shallow work.
    """

    def __init__(self, rules: CategoryRules) -> None:
        self.distraction_keywords = rules.distraction_keywords
        self.productive_keywords = rules.productive_keywords

    def classify(self, app_identifier: str, window_title: Optional[str]) -> Category:
        if not window_title:
            return Category.SHALLOW_WORK
        title = window_title.lower()
        if any(k in title for k in self.distraction_keywords):
            return Category.DISTRACTION
        if any(k in title for k in self.productive_keywords):
            return Category.SHALLOW_WORK
        return Category.SHALLOW_WORK


class Categorizer:
    """Dispatches each identifier to its classification strategy."""

    def __init__(self, rules: CategoryRules) -> None:
        self.rules = rules
        self._base = BaseCategoryStrategy(rules)
        title_strategy = TitleCategoryStrategy(rules)
        self._strategies: dict[str, CategoryStrategy] = {
            app_id: title_strategy for app_id in rules.title_sensitive
        }

    def category(
        self, app_identifier: str, window_title: Optional[str] = None
    ) -> Category:
        """Return the Category for *app_identifier*.

        Title-sensitive identifiers are classified from *window_title*;
        every other identifier uses the static lookup.
        """
        strategy = self._strategies.get(app_identifier, self._base)
        return strategy.classify(app_identifier, window_title)

    @staticmethod
    def load_rules(path: str) -> CategoryRules:
        """Deserialize CategoryRules from a JSON file.

        The file must contain an object with the same keys as the
        ``categorization`` section of config.json.
        """
        file_path = Path(path)
        with open(file_path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        return CategoryRules.from_config(data)

    @staticmethod
    def save_rules(rules: CategoryRules, path: str) -> None:
        """Serialize CategoryRules to a JSON file."""
        file_path = Path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "w", encoding="utf-8") as fh:
            json.dump(rules.to_config(), fh, indent=2)
