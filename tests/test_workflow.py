"""Tests for canonicalization and the resolution workflow.

Tests are organized bottom-up:
  1. Types: derived attachment attributes
  2. Canonicalizer: lookup + short-lived cache
  3. Workflow: per-token outcomes, ordering, partial failure
  4. Summary: counts for the presentation layer
"""

from __future__ import annotations

import pytest

from med_notes.core.exceptions import LookupUnavailable, ValidationError
from med_notes.core.types import (
    FeatureAttachment,
    ResolutionStatus,
    Token,
    ValueModifier,
)
from med_notes.resolution.canonicalizer import Canonicalizer, canonical_cache_key
from med_notes.resolution.stats import stats_cache_key
from med_notes.resolution.workflow import ResolutionWorkflow, summarize


@pytest.fixture
def canonicalizer(registry, cache, config) -> Canonicalizer:
    return Canonicalizer(registry, cache, config)


@pytest.fixture
def workflow(canonicalizer, registry, cache) -> ResolutionWorkflow:
    return ResolutionWorkflow(canonicalizer, registry, cache)


# =====================================================================
# 1. Types
# =====================================================================


class TestFeatureAttachment:
    def test_from_plain_token(self):
        t = Token(original_text="+Dyspnea", clean_text="Dyspnea")
        assert FeatureAttachment.from_token(t) == FeatureAttachment(is_present=True, value_text="")

    def test_from_absent_arrow_token(self):
        t = Token(original_text="-Ferritin↓", clean_text="Ferritin", is_present=False,
                  value_modifier=ValueModifier.DOWN)
        assert FeatureAttachment.from_token(t) == FeatureAttachment(is_present=False, value_text="↓")

    def test_from_comparison_token(self):
        t = Token(original_text="MCV<80", clean_text="MCV", value_modifier=ValueModifier.LT,
                  numeric_value=80)
        assert FeatureAttachment.from_token(t).value_text == "<80"


# =====================================================================
# 2. Canonicalizer
# =====================================================================


class TestCanonicalizer:
    @pytest.mark.asyncio
    async def test_exact_name(self, canonicalizer):
        feature = await canonicalizer.canonicalize("Dyspnea")
        assert feature.id == "f-dyspnea"
        assert feature.name == "Dyspnea"

    @pytest.mark.asyncio
    async def test_alias_resolves_to_canonical(self, canonicalizer):
        feature = await canonicalizer.canonicalize("SOB")
        assert feature.id == "f-dyspnea"

    @pytest.mark.asyncio
    async def test_no_match_is_none(self, canonicalizer):
        assert await canonicalizer.canonicalize("Splenomegaly") is None

    @pytest.mark.asyncio
    async def test_blank_text_skips_lookup(self, canonicalizer, registry):
        assert await canonicalizer.canonicalize("  ") is None
        assert registry.canonical_calls == []

    @pytest.mark.asyncio
    async def test_hits_are_cached_case_insensitively(self, canonicalizer, registry, cache):
        await canonicalizer.canonicalize("Ferritin")
        await canonicalizer.canonicalize("ferritin")
        assert registry.canonical_calls == ["Ferritin"]
        assert cache.contains(canonical_cache_key("FERRITIN"))

    @pytest.mark.asyncio
    async def test_misses_are_not_cached(self, canonicalizer, registry):
        await canonicalizer.canonicalize("Splenomegaly")
        from med_notes.core.types import FeatureType

        registry.add_feature("f-spleno", "Splenomegaly", FeatureType.SIGN)
        feature = await canonicalizer.canonicalize("Splenomegaly")
        assert feature.id == "f-spleno"
        assert len(registry.canonical_calls) == 2

    @pytest.mark.asyncio
    async def test_cache_expires(self, canonicalizer, registry, fake_clock):
        await canonicalizer.canonicalize("MCV")
        fake_clock.advance(61)
        await canonicalizer.canonicalize("MCV")
        assert len(registry.canonical_calls) == 2

    @pytest.mark.asyncio
    async def test_transport_failure_raises(self, canonicalizer, registry):
        registry.fail_canonical_for = {"mcv"}
        with pytest.raises(LookupUnavailable):
            await canonicalizer.canonicalize("MCV")


# =====================================================================
# 3. Workflow
# =====================================================================


class TestResolve:
    @pytest.mark.asyncio
    async def test_requires_target_entity(self, workflow):
        with pytest.raises(ValidationError):
            await workflow.resolve("+Dyspnea", "")
        with pytest.raises(ValidationError):
            await workflow.resolve("+Dyspnea", "   ")

    @pytest.mark.asyncio
    async def test_empty_input_has_no_side_effects(self, workflow, registry):
        assert await workflow.resolve("   ", "disease-1") == []
        assert registry.canonical_calls == []
        assert registry.attach_calls == []

    @pytest.mark.asyncio
    async def test_one_resolvable_one_unresolvable(self, workflow):
        results = await workflow.resolve("+Dyspnea Splenomegaly", "disease-1")
        assert len(results) == 2
        assert [r.token.original_text for r in results] == ["+Dyspnea", "Splenomegaly"]
        assert [r.attached for r in results] == [True, False]
        assert results[1].status is ResolutionStatus.NOT_FOUND
        assert results[1].needs_manual_creation is True
        assert results[1].error is None

    @pytest.mark.asyncio
    async def test_full_example_attaches_with_attributes(self, workflow, registry):
        results = await workflow.resolve("+Dyspnea -Murmur Ferritin↓ MCV<80", "disease-1")
        assert all(r.status is ResolutionStatus.ATTACHED for r in results)
        assert [c[1] for c in registry.attach_calls] == [
            "f-dyspnea", "f-murmur", "f-ferritin", "f-mcv",
        ]
        attachments = [c[2] for c in registry.attach_calls]
        assert attachments == [
            FeatureAttachment(is_present=True, value_text=""),
            FeatureAttachment(is_present=False, value_text=""),
            FeatureAttachment(is_present=True, value_text="↓"),
            FeatureAttachment(is_present=True, value_text="<80"),
        ]
        assert results[3].record["value_text"] == "<80"

    @pytest.mark.asyncio
    async def test_alias_resolves_to_canonical_name(self, workflow):
        (result,) = await workflow.resolve("SOB", "disease-1")
        assert result.canonical_feature_id == "f-dyspnea"
        assert result.canonical_name == "Dyspnea"
        assert result.token.clean_text == "SOB"

    @pytest.mark.asyncio
    async def test_empty_clean_text_is_unresolved_without_lookup(self, workflow, registry):
        results = await workflow.resolve("+ Dyspnea ↑", "disease-1")
        assert [r.status for r in results] == [
            ResolutionStatus.EMPTY,
            ResolutionStatus.ATTACHED,
            ResolutionStatus.EMPTY,
        ]
        assert registry.canonical_calls == ["Dyspnea"]
        assert results[0].needs_manual_creation is False

    @pytest.mark.asyncio
    async def test_lookup_failure_does_not_abort_batch(self, workflow, registry):
        registry.fail_canonical_for = {"murmur"}
        results = await workflow.resolve("+Dyspnea -Murmur Ferritin↓", "disease-1")
        assert [r.status for r in results] == [
            ResolutionStatus.ATTACHED,
            ResolutionStatus.LOOKUP_FAILED,
            ResolutionStatus.ATTACHED,
        ]
        failed = results[1]
        assert failed.error and "murmur" in failed.error.lower()
        assert failed.needs_manual_creation is False
        assert failed.is_retryable

    @pytest.mark.asyncio
    async def test_lookup_failure_distinct_from_no_match(self, workflow, registry):
        registry.fail_canonical_for = {"dyspnea"}
        failed, missing = await workflow.resolve("Dyspnea Splenomegaly", "disease-1")
        assert failed.status is ResolutionStatus.LOOKUP_FAILED
        assert missing.status is ResolutionStatus.NOT_FOUND
        assert failed.needs_manual_creation != missing.needs_manual_creation

    @pytest.mark.asyncio
    async def test_attach_failure_continues_with_remaining_tokens(self, workflow, registry):
        registry.fail_attach_for = {"f-murmur"}
        results = await workflow.resolve("+Dyspnea -Murmur Ferritin↓ MCV<80", "disease-1")
        assert len(results) == 4
        assert len(registry.attach_calls) == 4
        murmur = results[1]
        assert murmur.status is ResolutionStatus.ATTACH_FAILED
        assert murmur.attached is False
        assert murmur.canonical_feature_id == "f-murmur"
        assert "row-level security" in murmur.error
        assert [r.attached for r in results] == [True, False, True, True]

    @pytest.mark.asyncio
    async def test_unexpected_writer_error_is_captured(self, canonicalizer, cache):
        class BrokenWriter:
            async def attach_feature(self, entity_id, feature_id, attachment):
                raise RuntimeError("connection reset")

        workflow = ResolutionWorkflow(canonicalizer, BrokenWriter(), cache)
        (result,) = await workflow.resolve("Dyspnea", "disease-1")
        assert result.status is ResolutionStatus.ATTACH_FAILED
        assert result.error == "connection reset"

    @pytest.mark.asyncio
    async def test_tokens_processed_sequentially(self, canonicalizer, cache):
        events: list[str] = []

        class RecordingWriter:
            async def attach_feature(self, entity_id, feature_id, attachment):
                events.append(f"attach:{feature_id}")
                return {}

        class RecordingLookup:
            async def lookup_canonical(self, text):
                events.append(f"lookup:{text}")
                from med_notes.core.types import CanonicalFeature

                return CanonicalFeature(id=text.lower(), name=text)

        ordered = ResolutionWorkflow(
            Canonicalizer(RecordingLookup(), cache), RecordingWriter(), cache
        )
        await ordered.resolve("A B C", "disease-1")
        assert events == [
            "lookup:A", "attach:a",
            "lookup:B", "attach:b",
            "lookup:C", "attach:c",
        ]

    @pytest.mark.asyncio
    async def test_successful_attach_invalidates_entity_stats(self, workflow, cache):
        cache.set(stats_cache_key("disease-1"), {"feature_count": 0})
        cache.set(stats_cache_key("disease-2"), {"feature_count": 5})
        await workflow.resolve("+Dyspnea", "disease-1")
        assert not cache.contains(stats_cache_key("disease-1"))
        assert cache.contains(stats_cache_key("disease-2"))

    @pytest.mark.asyncio
    async def test_no_attach_keeps_entity_stats(self, workflow, cache):
        cache.set(stats_cache_key("disease-1"), {"feature_count": 0})
        await workflow.resolve("Splenomegaly", "disease-1")
        assert cache.contains(stats_cache_key("disease-1"))


class TestParsePreview:
    @pytest.mark.asyncio
    async def test_preview_does_not_attach(self, workflow, registry):
        results = await workflow.parse("+Dyspnea Splenomegaly")
        assert registry.attach_calls == []
        assert results[0].status is ResolutionStatus.PREVIEW
        assert results[0].canonical_feature_id == "f-dyspnea"
        assert results[0].attached is False
        assert results[1].status is ResolutionStatus.NOT_FOUND


# =====================================================================
# 4. Summary
# =====================================================================


class TestSummary:
    @pytest.mark.asyncio
    async def test_counts(self, workflow, registry):
        registry.fail_attach_for = {"f-ferritin"}
        results = await workflow.resolve("+Dyspnea Splenomegaly Ferritin↓ +", "disease-1")
        report = summarize(results)
        assert report.total == 4
        assert report.recognized == 2
        assert report.attached == 1
        assert report.needs_manual_creation == 1
        assert report.failed == 1
        assert report.empty == 1
        assert not report.all_attached

    def test_empty(self):
        report = summarize([])
        assert report.total == 0
        assert not report.all_attached
