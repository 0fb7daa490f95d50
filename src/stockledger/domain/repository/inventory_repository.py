"""Abstract repository for InventoryItem aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.inventory import InventoryItem


class InventoryRepository(ABC):

    @abstractmethod
    def get_by_serial_number(self, serial_number: str) -> InventoryItem | None:
        """Return the inventory record for a unit, or None."""

    @abstractmethod
    def list_by_category(self, equipment_category: str) -> list[InventoryItem]:
        """Return every record whose category matches exactly."""

    @abstractmethod
    def list_all(self) -> list[InventoryItem]:
        """Return every inventory record."""
