"""
Unit tests for canonical value folding.
"""

import pytest

from services.discovery.Canonicalizer import CanonicalRegistry, Canonicalizer, build_registries
from shared.models.document import FilterCategory


@pytest.fixture
def canonicalizer(matcher):
    return Canonicalizer(matcher=matcher, threshold=0.2)


def test_exact_member_returned_unchanged(canonicalizer):
    assert canonicalizer.canonicalize("John Doe", ["Jane Smith", "John Doe"]) == "John Doe"


def test_typo_folds_into_existing_label(canonicalizer):
    assert canonicalizer.canonicalize("Jon Doe", ["John Doe"]) == "John Doe"


def test_case_variant_folds_into_existing_label(canonicalizer):
    assert canonicalizer.canonicalize("JOHN DOE", ["John Doe"]) == "John Doe"


def test_distinct_value_is_promoted(canonicalizer):
    assert canonicalizer.canonicalize("Jane Smith", ["John Doe"]) == "Jane Smith"


def test_empty_registry_returns_raw(canonicalizer):
    assert canonicalizer.canonicalize("Passport", []) == "Passport"


def test_registry_is_not_modified(canonicalizer):
    registry = ["John Doe"]
    canonicalizer.canonicalize("Jane Smith", registry)
    assert registry == ["John Doe"]


def test_canonicalize_is_idempotent(canonicalizer):
    registry = ["John Doe", "Jane Smith"]
    for raw in ["Jon Doe", "JOHN DOE", "Jane Smith", "Max Mustermann"]:
        once = canonicalizer.canonicalize(raw, registry)
        assert canonicalizer.canonicalize(once, registry) == once


def test_canonicalize_is_deterministic(canonicalizer):
    registry = ["John Doe", "Jane Smith"]
    assert {canonicalizer.canonicalize("Jon Doe", registry) for _ in range(10)} == {"John Doe"}


def test_invalid_threshold_rejected(matcher):
    with pytest.raises(ValueError):
        Canonicalizer(matcher=matcher, threshold=1.2)


def test_zero_threshold_only_folds_normalized_equals(matcher):
    strict = Canonicalizer(matcher=matcher, threshold=0.0)
    assert strict.canonicalize("Jon Doe", ["John Doe"]) == "Jon Doe"
    assert strict.canonicalize("john doe", ["John Doe"]) == "John Doe"


class TestCanonicalRegistry:
    def test_first_seen_spelling_becomes_label(self, canonicalizer):
        registry = CanonicalRegistry(canonicalizer)
        assert registry.add("Jon Doe") == "Jon Doe"
        assert registry.add("John Doe") == "Jon Doe"
        assert registry.get_values() == ["Jon Doe"]

    def test_no_two_labels_for_one_entity(self, canonicalizer):
        registry = CanonicalRegistry(canonicalizer)
        for raw in ["John Doe", "Jon Doe", "JOHN DOE", "Jane Smith", "john doe"]:
            registry.add(raw)
        assert registry.get_values() == ["John Doe", "Jane Smith"]
        assert len(registry) == 2

    def test_resolve_maps_raw_values(self, canonicalizer):
        registry = CanonicalRegistry(canonicalizer)
        registry.add("John Doe")
        registry.add("Jon Doe")
        assert registry.resolve("Jon Doe") == "John Doe"
        assert registry.resolve("Unknown") is None
        assert registry.resolve(None) is None

    def test_options_sorted(self, canonicalizer):
        registry = CanonicalRegistry(canonicalizer)
        for raw in ["Passport", "Contract", "Invoice"]:
            registry.add(raw)
        assert registry.get_options() == ["Contract", "Invoice", "Passport"]
        assert registry.get_values() == ["Passport", "Contract", "Invoice"]
        assert "Invoice" in registry


def test_build_registries(documents, canonicalizer):
    registries = build_registries(documents, canonicalizer)
    assert set(registries) == set(FilterCategory)
    assert registries[FilterCategory.OWNER].get_values() == ["John Doe", "Jane Smith"]
    assert registries[FilterCategory.TYPE].get_options() == ["Contract", "Invoice", "Passport"]
    assert registries[FilterCategory.COUNTRY].get_values() == ["Germany", "France"]
    assert registries[FilterCategory.COMPANY].get_values() == ["Stadtwerke", "Vodafone"]


def test_processing_documents_stay_out_of_vocabularies(documents, canonicalizer):
    registries = build_registries(documents, canonicalizer)
    assert "Processing" not in registries[FilterCategory.OWNER]
    assert "Processing" not in registries[FilterCategory.TYPE]
