from __future__ import annotations

import json
import math
import random

import pytest

from conftest import EXERCISES, FOODS
from models.domain_models import CatalogEntry, ObjectKind
from services.world_objects import (
    MIN_SEPARATION,
    WorldObjectGenerator,
    load_catalog,
    parse_catalog,
)


def test_generate_has_four_negative_then_two_positive(generator):
    objects = generator.generate()
    kinds = [obj.kind for obj in objects]
    assert kinds == [ObjectKind.NEGATIVE] * 4 + [ObjectKind.POSITIVE] * 2


def test_generated_objects_are_in_bounds_and_separated(generator):
    for _ in range(20):
        objects = generator.generate()
        for obj in objects:
            assert 10 <= obj.x <= 230
            assert 10 <= obj.y <= 230
        for i, a in enumerate(objects):
            for b in objects[i + 1:]:
                assert math.hypot(a.x - b.x, a.y - b.y) >= MIN_SEPARATION


def test_generated_ids_are_unique_and_labels_come_from_catalog(generator):
    objects = generator.generate()
    assert len({obj.object_id for obj in objects}) == len(objects)
    labels = {entry.label for entry in FOODS + EXERCISES}
    assert all(obj.label in labels for obj in objects)
    # sampled without replacement within a kind
    assert len({obj.label for obj in objects}) == len(objects)


def test_same_seed_gives_same_layout():
    a = WorldObjectGenerator(FOODS, EXERCISES, rng=random.Random(42)).generate()
    b = WorldObjectGenerator(FOODS, EXERCISES, rng=random.Random(42)).generate()
    assert a == b


def test_small_catalog_uses_every_entry():
    foods = FOODS[:2]
    objects = WorldObjectGenerator(foods, EXERCISES, rng=random.Random(1)).generate()
    negatives = [obj for obj in objects if obj.kind is ObjectKind.NEGATIVE]
    assert sorted(obj.label for obj in negatives) == sorted(entry.label for entry in foods)


def test_crowded_area_still_terminates():
    # 6 objects cannot be 35 apart in a 10x10 square; placement must relax
    gen = WorldObjectGenerator(
        FOODS, EXERCISES,
        placement_span=10.0,
        max_attempts=50,
        rng=random.Random(3),
    )
    objects = gen.generate()
    assert len(objects) == 6
    assert all(10 <= obj.x <= 20 and 10 <= obj.y <= 20 for obj in objects)


def test_parse_catalog_reads_legacy_field_names():
    raw = [
        {"food": "Donut", "bg_rise_mgdl": 45},
        {"food": "Apple"},
        {"bg_rise_mgdl": 10},
        "not a record",
    ]
    entries = parse_catalog(raw, ObjectKind.NEGATIVE)
    assert entries == [
        CatalogEntry(ObjectKind.NEGATIVE, "Donut", 45.0),
        CatalogEntry(ObjectKind.NEGATIVE, "Apple", None),
    ]

    exercises = parse_catalog([{"exercise": "Walk", "est_bg_change_mgdl": -25}], ObjectKind.POSITIVE)
    assert exercises == [CatalogEntry(ObjectKind.POSITIVE, "Walk", -25.0)]


def test_load_catalog_from_file(tmp_path):
    path = tmp_path / "foods.json"
    path.write_text(json.dumps([{"food": "Cola", "bg_rise_mgdl": 60}]), encoding="utf-8")
    assert load_catalog(path, ObjectKind.NEGATIVE) == [CatalogEntry(ObjectKind.NEGATIVE, "Cola", 60.0)]


def test_load_catalog_rejects_non_list(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"food": "Cola"}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_catalog(path, ObjectKind.NEGATIVE)


def test_shipped_catalogs_are_large_enough():
    import config

    gen = WorldObjectGenerator.from_files(config.FOOD_CATALOG_PATH, config.EXERCISE_CATALOG_PATH)
    assert len(gen.negative_catalog) >= 4
    assert len(gen.positive_catalog) >= 2
    assert len(gen.generate()) == 6
