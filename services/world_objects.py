# world_objects.py
import json
import logging
import math
import random
import uuid
from pathlib import Path
from typing import Any, Iterable, Optional

from models.domain_models import CatalogEntry, ObjectKind, WorldObject

logger = logging.getLogger(__name__)

NEGATIVE_COUNT = 4
POSITIVE_COUNT = 2

# Layout space: the claw's centered [-120, 120] square shifted by +130
PLACEMENT_MIN = 10.0
PLACEMENT_SPAN = 220.0
MIN_SEPARATION = 35.0

MAX_PLACEMENT_ATTEMPTS = 1000
SEPARATION_RELAX_FACTOR = 0.8
MIN_RELAXED_SEPARATION = 1.0

# Catalog field names, most specific first
_LABEL_KEYS = ("food", "exercise", "label", "name")
_IMPACT_KEYS = {
    ObjectKind.NEGATIVE: ("bg_rise_mgdl", "bg_rise", "impact"),
    ObjectKind.POSITIVE: ("est_bg_change_mgdl", "bg_rise", "impact"),
}


# --- Catalog loading ---

def parse_catalog(raw: Iterable[Any], kind: ObjectKind) -> list[CatalogEntry]:
    """Turn raw catalog records into entries, skipping ones without a label."""
    entries = []
    for record in raw:
        if not isinstance(record, dict):
            continue
        label = next(
            (str(record[k]).strip() for k in _LABEL_KEYS if isinstance(record.get(k), str) and record[k].strip()),
            None,
        )
        if label is None:
            logger.warning("[CATALOG] skipping %s record without a label: %r", kind.value, record)
            continue
        impact = None
        for key in _IMPACT_KEYS[kind]:
            value = record.get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                impact = float(value)
                break
        entries.append(CatalogEntry(kind=kind, label=label, impact=impact))
    return entries


def load_catalog(path: Path, kind: ObjectKind) -> list[CatalogEntry]:
    """Load a JSON list catalog from disk."""
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        raise ValueError(f"catalog {path} must be a JSON list")
    entries = parse_catalog(raw, kind)
    logger.info("[CATALOG] loaded %d %s entries from %s", len(entries), kind.value, path)
    return entries


# --- Generator ---

class WorldObjectGenerator:
    """Produces a fresh, well separated random layout of collectible objects.

    Shape is fixed (NEGATIVE_COUNT + POSITIVE_COUNT objects) while catalog
    sample and coordinates are random. Placement is rejection sampling with a
    bounded number of attempts; when a pass is exhausted the separation is
    relaxed and placement retried, so generation always terminates.
    """

    def __init__(
        self,
        negative_catalog: list[CatalogEntry],
        positive_catalog: list[CatalogEntry],
        *,
        negative_count: int = NEGATIVE_COUNT,
        positive_count: int = POSITIVE_COUNT,
        min_separation: float = MIN_SEPARATION,
        placement_min: float = PLACEMENT_MIN,
        placement_span: float = PLACEMENT_SPAN,
        max_attempts: int = MAX_PLACEMENT_ATTEMPTS,
        rng: Optional[random.Random] = None,
    ):
        self.negative_catalog = list(negative_catalog)
        self.positive_catalog = list(positive_catalog)
        self.negative_count = negative_count
        self.positive_count = positive_count
        self.min_separation = min_separation
        self.placement_min = placement_min
        self.placement_span = placement_span
        self.max_attempts = max(1, max_attempts)
        self.rng = rng or random.Random()

    @classmethod
    def from_files(cls, negative_path: Path, positive_path: Path, **kwargs) -> "WorldObjectGenerator":
        return cls(
            load_catalog(negative_path, ObjectKind.NEGATIVE),
            load_catalog(positive_path, ObjectKind.POSITIVE),
            **kwargs,
        )

    def _sample(self, catalog: list[CatalogEntry], count: int) -> list[CatalogEntry]:
        if count > len(catalog):
            logger.warning(
                "[CATALOG] asked for %d entries but catalog has %d; using all", count, len(catalog)
            )
            count = len(catalog)
        return self.rng.sample(catalog, count)

    def _candidate(self) -> tuple[float, float]:
        x = self.rng.random() * self.placement_span + self.placement_min
        y = self.rng.random() * self.placement_span + self.placement_min
        return x, y

    def _place(self, placed: list[tuple[float, float]]) -> tuple[float, float]:
        separation = self.min_separation
        while True:
            for _ in range(self.max_attempts):
                x, y = self._candidate()
                if all(math.hypot(px - x, py - y) >= separation for px, py in placed):
                    return x, y
            relaxed = separation * SEPARATION_RELAX_FACTOR
            if relaxed < MIN_RELAXED_SEPARATION:
                relaxed = 0.0
            logger.warning(
                "[GENERATOR] no spot %.1f apart after %d attempts (%d placed); relaxing to %.1f",
                separation, self.max_attempts, len(placed), relaxed,
            )
            separation = relaxed

    def generate(self) -> list[WorldObject]:
        """Return a new layout: negative entries first, then positive ones."""
        placed: list[tuple[float, float]] = []
        objects = []
        picks = self._sample(self.negative_catalog, self.negative_count) + self._sample(
            self.positive_catalog, self.positive_count
        )
        for entry in picks:
            x, y = self._place(placed)
            placed.append((x, y))
            objects.append(
                WorldObject(
                    object_id=uuid.UUID(int=self.rng.getrandbits(128)).hex[:12],
                    kind=entry.kind,
                    label=entry.label,
                    impact=entry.impact,
                    x=x,
                    y=y,
                )
            )
        logger.info("[GENERATOR] generated layout with %d objects", len(objects))
        return objects
