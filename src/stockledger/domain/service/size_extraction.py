"""Best-effort derivation of a panel's physical size (in inches).

Older imports did not always fill in the ``size`` field, so the size is
looked up through an ordered list of extractors.  Each extractor returns
``(value, matched)``; the first match wins.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable

from stockledger.domain.model.inventory import InventoryItem

# Common interactive flat panel sizes found embedded in serial numbers.
KNOWN_PANEL_SIZES = ("55", "65", "75", "86")

_DIGITS = re.compile(r"(\d+)")
_LEADING_DIGITS = re.compile(r"^(\d+)")
_PANEL_SIZE_TOKEN = re.compile("(" + "|".join(KNOWN_PANEL_SIZES) + ")")
_INCH_MARKED = re.compile(r'(\d+)\s*(?:inch|")', re.IGNORECASE)

Extraction = tuple[str | None, bool]
Extractor = Callable[[InventoryItem], Extraction]

_NO_MATCH: Extraction = (None, False)


def _search(pattern: re.Pattern[str], text: str | None) -> Extraction:
    if not text:
        return _NO_MATCH
    match = pattern.search(text)
    if match is None:
        return _NO_MATCH
    return match.group(1), True


def from_size_field(item: InventoryItem) -> Extraction:
    """Digits of the stored ``size`` value, unless it is blank or 'Unknown'."""
    if not item.size or item.size.strip() == "Unknown":
        return _NO_MATCH
    return _search(_DIGITS, item.size)


def from_model_prefix(item: InventoryItem) -> Extraction:
    """Leading digits of the model name, e.g. '65M6APro' -> '65'."""
    return _search(_LEADING_DIGITS, item.model)


def from_equipment_model(item: InventoryItem) -> Extraction:
    return _search(_DIGITS, item.equipment_model)


def from_serial_number(item: InventoryItem) -> Extraction:
    return _search(_PANEL_SIZE_TOKEN, item.serial_number)


def from_inch_marker(item: InventoryItem) -> Extraction:
    """A number followed by 'inch' or '"' in any remaining text field."""
    for text in _free_text_fields(item):
        value, matched = _search(_INCH_MARKED, text)
        if matched:
            return value, matched
    return _NO_MATCH


def _free_text_fields(item: InventoryItem) -> Iterable[str]:
    yield item.remark
    yield item.batch
    yield from item.attributes.values()


SIZE_EXTRACTORS: tuple[Extractor, ...] = (
    from_size_field,
    from_model_prefix,
    from_equipment_model,
    from_serial_number,
    from_inch_marker,
)


def extract_size(
    item: InventoryItem,
    extractors: Iterable[Extractor] = SIZE_EXTRACTORS,
) -> str | None:
    """Return the first size any extractor finds, or None if undetermined."""
    for extractor in extractors:
        value, matched = extractor(item)
        if matched:
            return value
    return None
