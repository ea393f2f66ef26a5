"""Suggestion matching, canonicalization and the resolution workflow."""

from med_notes.resolution.cache import BoundedCache
from med_notes.resolution.canonicalizer import Canonicalizer
from med_notes.resolution.config import ResolutionConfig
from med_notes.resolution.debounce import Debouncer, PendingRequest
from med_notes.resolution.invalidation import CacheInvalidator
from med_notes.resolution.matcher import SuggestionMatcher, SuggestionState
from med_notes.resolution.stats import EntityStatsLookup
from med_notes.resolution.workflow import ResolutionReport, ResolutionWorkflow, summarize

__all__ = [
    "BoundedCache",
    "CacheInvalidator",
    "Canonicalizer",
    "Debouncer",
    "EntityStatsLookup",
    "PendingRequest",
    "ResolutionConfig",
    "ResolutionReport",
    "ResolutionWorkflow",
    "SuggestionMatcher",
    "SuggestionState",
    "summarize",
]
