"""Application service: Category Breakdown use case (query).

Counts the units of one equipment category by materialized status and
groups the active ones by model.  Categories sold in several physical
sizes additionally get a per-size grouping.
"""

from __future__ import annotations

from collections.abc import Iterable

from stockledger.application.dto import CategoryBreakdown, ModelCount, SizeBreakdown
from stockledger.domain.model.value_objects import ItemStatus
from stockledger.domain.repository.inventory_repository import InventoryRepository
from stockledger.domain.service.size_extraction import extract_size

DEFAULT_SIZE_TRACKED_CATEGORIES = ("Interactive Flat Panel",)
UNKNOWN_MODEL = "Unknown"


class _ModelTally:
    """Active counts keyed by lower-cased model name.

    The display spelling is the one seen last for each key.
    """

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._display: dict[str, str] = {}

    def add(self, model: str) -> None:
        key = model.lower()
        self._counts[key] = self._counts.get(key, 0) + 1
        self._display[key] = model

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def ranked(self) -> list[ModelCount]:
        """Models by descending count, ties broken by name."""
        entries = [
            ModelCount(model=self._display[key], active_count=count)
            for key, count in self._counts.items()
        ]
        entries.sort(key=lambda e: (-e.active_count, e.model.lower()))
        return entries


class CategoryBreakdownHandler:

    def __init__(
        self,
        inventory_repo: InventoryRepository,
        size_tracked_categories: Iterable[str] = DEFAULT_SIZE_TRACKED_CATEGORIES,
    ) -> None:
        self._inventory_repo = inventory_repo
        self._size_tracked = frozenset(size_tracked_categories)

    def handle(self, category: str) -> CategoryBreakdown:
        track_sizes = category in self._size_tracked

        active = reserved = delivered = 0
        models = _ModelTally()
        sizes: dict[str, _ModelTally] = {}

        items = self._inventory_repo.list_by_category(category)
        for item in items:
            if item.status == ItemStatus.RESERVED:
                reserved += 1
                continue
            if item.status == ItemStatus.DELIVERED:
                delivered += 1
                continue

            active += 1
            model = item.model or UNKNOWN_MODEL
            models.add(model)
            if track_sizes:
                size = extract_size(item)
                if size is not None:
                    sizes.setdefault(size, _ModelTally()).add(model)

        return CategoryBreakdown(
            category_name=category,
            total_items=len(items),
            active_items=active,
            reserved_items=reserved,
            delivered_items=delivered,
            models=models.ranked(),
            size_breakdown=[
                SizeBreakdown(
                    size=size,
                    total_active=sizes[size].total,
                    models=sizes[size].ranked(),
                )
                for size in sorted(sizes, key=int)
            ],
        )
