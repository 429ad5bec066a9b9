"""
Property-based tests with Hypothesis.
"""

from hypothesis import given, settings, strategies as st

from storefront_shared.config.constants import SWEEP_FAILED
from storefront_shared.utils.validators import slugify, validate_slug
from storefront_api.services.trash import EntityType, SweepResult, group_by_type


entity_types = st.sampled_from(list(EntityType))
ids = st.text(alphabet="abcdef0123456789", min_size=1, max_size=8)


class TestSlugProperties:

    @given(name=st.text(max_size=80))
    @settings(max_examples=200)
    def test_slugify_is_idempotent(self, name):
        """Property: a derived slug is already canonical."""
        slug = slugify(name)
        assert slugify(slug) == slug

    @given(name=st.text(max_size=80))
    def test_derived_slug_passes_validation(self, name):
        slug = slugify(name)
        if slug:
            assert validate_slug(slug) == slug
            assert "--" not in slug
            assert not slug.startswith("-") and not slug.endswith("-")


class TestGroupingProperties:

    @given(items=st.lists(st.tuples(entity_types, ids), max_size=30))
    def test_grouping_keeps_every_distinct_item(self, items):
        """Property: grouping neither drops nor duplicates a selection."""
        grouped = group_by_type(items)

        flattened = {(etype, i) for etype, group in grouped.items() for i in group}
        assert flattened == set(items)
        assert sum(len(g) for g in grouped.values()) == len(set(items))

    @given(items=st.lists(st.tuples(entity_types, ids), min_size=1, max_size=30))
    def test_groups_follow_first_seen_order(self, items):
        grouped = group_by_type(items)

        first_seen = list(dict.fromkeys(etype for etype, _ in items))
        assert list(grouped) == first_seen


class TestSweepResultProperties:

    @given(counts=st.dictionaries(st.sampled_from([t.value for t in EntityType]), st.integers(min_value=-1, max_value=500)))
    def test_total_ignores_failed_types(self, counts):
        result = SweepResult(cleaned=counts)

        assert result.total == sum(n for n in counts.values() if n != SWEEP_FAILED)
        assert set(result.failed_types) == {t for t, n in counts.items() if n == SWEEP_FAILED}
