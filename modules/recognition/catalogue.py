"""
Catalogue loading and validation.

Accepted YAML shapes (under an ``entries`` key, or as a bare list):

    - label: hibiscus
      synonyms: [hibiscus, rose of sharon, rosemallow]
      asset: hibiscus.jpg

    - [hibiscus, rose of sharon, rosemallow]    # first synonym is the label
"""

import logging
from typing import Iterable, Tuple

import yaml

from core.types import CatalogueEntry

logger = logging.getLogger(__name__)


# The installation's flowers, used when no catalogue file is configured
DEFAULT_CATALOGUE = [
    ["daffodil", "narcissus", "jonquil"],
    ["daisy", "ox-eye", "bellis"],
    ["forget me not", "myosotis", "mouse ear"],
    ["hibiscus", "rose of sharon", "rosemallow"],
    ["iris", "flag iris", "sword lily"],
    ["jasmine", "jessamine", "carolina jasmine"],
    ["lavender", "lavandula", "purple sage"],
    ["lily of the valley", "convallaria", "may lily"],
    ["lotus", "water lily", "sacred lotus"],
    ["morning glory", "ipomoea", "bindweed"],
    ["orchid", "orchidaceae", "phalaenopsis"],
    ["peony", "paeonia", "pioney"],
    ["poppy", "papaver", "corn poppy"],
    ["rose", "rosa", "queen of flowers"],
    ["sunflower", "helianthus", "sun disk"],
    ["tulip", "tulipa", "lady tulip"],
    ["violet", "viola", "sweet violet"],
    ["wisteria", "wistaria", "glycine"],
]


def _parse_entry(position: int, raw) -> CatalogueEntry:
    if isinstance(raw, str):
        raw = [raw]

    if isinstance(raw, dict):
        synonyms = raw.get("synonyms") or []
        if isinstance(synonyms, str):
            synonyms = [synonyms]
        label = raw.get("label")
        asset = raw.get("asset")
    elif isinstance(raw, (list, tuple)):
        synonyms = list(raw)
        label = None
        asset = None
    else:
        raise ValueError(f"Catalogue entry {position}: unsupported type {type(raw).__name__}")

    synonyms = tuple(str(s).strip() for s in synonyms if str(s).strip())
    if label and str(label).strip() and str(label).strip() not in synonyms:
        # The label is always a way to ask for the entry
        synonyms = (str(label).strip(),) + synonyms
    if not synonyms:
        raise ValueError(f"Catalogue entry {position}: at least one synonym is required")

    return CatalogueEntry(
        primary_label=str(label).strip() if label else synonyms[0],
        synonyms=synonyms,
        asset=asset,
    )


def build_catalogue(entries: Iterable) -> Tuple[CatalogueEntry, ...]:
    """Validate raw entries into an immutable catalogue."""
    catalogue = tuple(_parse_entry(i, raw) for i, raw in enumerate(entries or []))
    if not catalogue:
        raise ValueError("Catalogue must contain at least one entry")
    return catalogue


def load_catalogue(path: str = None, data=None) -> Tuple[CatalogueEntry, ...]:
    """Load the catalogue from a YAML file, already-parsed data, or defaults.

    Args:
        path: YAML file to read
        data: Parsed YAML (dict with ``entries`` or a list); wins over path
    """
    if data is None and path is not None:
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
            logger.info("Loaded catalogue from %s", path)
        except FileNotFoundError:
            logger.warning("Catalogue file not found: %s, using built-in flowers", path)

    if data is None:
        entries = DEFAULT_CATALOGUE
    elif isinstance(data, dict):
        entries = data.get("entries", [])
    else:
        entries = data

    catalogue = build_catalogue(entries)
    logger.info("Catalogue ready: %d entries", len(catalogue))
    return catalogue
