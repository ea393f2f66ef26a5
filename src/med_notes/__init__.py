"""Med Notes - clinical shorthand parsing and canonical feature resolution.

Turns free-form shorthand such as ``+Dyspnea -Murmur Ferritin↓ MCV<80``
into structured feature links on a clinical entity:

- Tokenizer (sign prefix, arrow or comparison suffix)
- Debounced, cached autocomplete suggestions
- Canonicalization against the feature registry
- Resolution workflow with per-token success/failure reporting
- TTL cache with prefix invalidation driven by change notifications

Example:
    >>> from med_notes import tokenize
    >>> [t.clean_text for t in tokenize("+Dyspnea -Murmur Ferritin↓ MCV<80")]
    ['Dyspnea', 'Murmur', 'Ferritin', 'MCV']
"""

__version__ = "0.1.0"

from med_notes.core.exceptions import (
    AttachFailed,
    LookupUnavailable,
    MedNotesError,
    ValidationError,
)
from med_notes.core.types import (
    CanonicalFeature,
    ChangeEvent,
    EntityStats,
    FeatureAttachment,
    FeatureType,
    MatchType,
    ResolutionStatus,
    ResolvedToken,
    Suggestion,
    Token,
    ValueModifier,
)
from med_notes.resolution import (
    BoundedCache,
    CacheInvalidator,
    Canonicalizer,
    Debouncer,
    EntityStatsLookup,
    ResolutionConfig,
    ResolutionReport,
    ResolutionWorkflow,
    SuggestionMatcher,
    summarize,
)
from med_notes.tokens import current_word, replace_word, tokenize

__all__ = [
    "__version__",
    # Tokenizer
    "current_word",
    "replace_word",
    "tokenize",
    # Types
    "CanonicalFeature",
    "ChangeEvent",
    "EntityStats",
    "FeatureAttachment",
    "FeatureType",
    "MatchType",
    "ResolutionStatus",
    "ResolvedToken",
    "Suggestion",
    "Token",
    "ValueModifier",
    # Resolution
    "BoundedCache",
    "CacheInvalidator",
    "Canonicalizer",
    "Debouncer",
    "EntityStatsLookup",
    "ResolutionConfig",
    "ResolutionReport",
    "ResolutionWorkflow",
    "SuggestionMatcher",
    "summarize",
    # Exceptions
    "AttachFailed",
    "LookupUnavailable",
    "MedNotesError",
    "ValidationError",
]
