"""ResolutionWorkflow: orchestrates tokenize → canonicalize → attach."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from med_notes.core.exceptions import AttachFailed, LookupUnavailable, ValidationError
from med_notes.core.protocols import EntityWriter
from med_notes.core.types import (
    FeatureAttachment,
    ResolutionStatus,
    ResolvedToken,
    Token,
)
from med_notes.resolution.cache import BoundedCache
from med_notes.resolution.canonicalizer import Canonicalizer
from med_notes.resolution.stats import stats_cache_key
from med_notes.tokens.tokenizer import tokenize

logger = logging.getLogger(__name__)


@dataclass
class ResolutionReport:
    """Counts shown under the processed tokens."""

    total: int = 0
    recognized: int = 0
    attached: int = 0
    needs_manual_creation: int = 0
    failed: int = 0
    empty: int = 0

    @property
    def all_attached(self) -> bool:
        return self.total > 0 and self.attached == self.total


def summarize(results: list[ResolvedToken]) -> ResolutionReport:
    report = ResolutionReport(total=len(results))
    for result in results:
        if result.is_resolved:
            report.recognized += 1
        if result.attached:
            report.attached += 1
        if result.needs_manual_creation:
            report.needs_manual_creation += 1
        if result.is_retryable:
            report.failed += 1
        if result.status is ResolutionStatus.EMPTY:
            report.empty += 1
    return report


class ResolutionWorkflow:
    """Resolves shorthand input against the canonical registry.

    Per token, in input order and one at a time:
      1. empty clean text → unresolved, no lookup
      2. canonicalize (LookupUnavailable → unresolved with error note)
      3. no match → unresolved, needs manual creation
      4. match → attach to the target (AttachFailed → recorded, continue)

    Failures are returned as data on each ResolvedToken; nothing raised by
    a collaborator escapes ``resolve``.
    """

    def __init__(
        self,
        canonicalizer: Canonicalizer,
        writer: EntityWriter,
        cache: BoundedCache | None = None,
    ) -> None:
        self._canonicalizer = canonicalizer
        self._writer = writer
        self._cache = cache

    async def resolve(self, raw_input: str, target_entity_id: str) -> list[ResolvedToken]:
        """Resolve every token and attach the matches to ``target_entity_id``."""
        if not target_entity_id or not str(target_entity_id).strip():
            raise ValidationError("resolve() requires a target entity id")

        tokens = tokenize(raw_input)
        if not tokens:
            return []

        results: list[ResolvedToken] = []
        for token in tokens:
            result = await self._lookup(token)
            if result.status is ResolutionStatus.PREVIEW and result.canonical_feature_id:
                result = await self._attach(
                    result, target_entity_id, result.canonical_feature_id
                )
            results.append(result)

        if self._cache is not None and any(r.attached for r in results):
            self._cache.invalidate(stats_cache_key(target_entity_id))

        report = summarize(results)
        logger.info(
            "Resolved %d tokens for %s: %d attached, %d need manual creation, %d failed",
            report.total,
            target_entity_id,
            report.attached,
            report.needs_manual_creation,
            report.failed,
        )
        return results

    async def parse(self, raw_input: str) -> list[ResolvedToken]:
        """Tokenize and canonicalize without writing anything."""
        return [await self._lookup(token) for token in tokenize(raw_input)]

    async def _lookup(self, token: Token) -> ResolvedToken:
        if token.is_empty:
            return ResolvedToken(token=token, status=ResolutionStatus.EMPTY)

        try:
            feature = await self._canonicalizer.canonicalize(token.clean_text)
        except LookupUnavailable as exc:
            logger.warning("Canonical lookup failed for %r: %s", token.original_text, exc)
            return ResolvedToken(
                token=token,
                status=ResolutionStatus.LOOKUP_FAILED,
                error=str(exc),
            )
        except Exception as exc:
            logger.exception("Unexpected canonical lookup error for %r", token.original_text)
            return ResolvedToken(
                token=token,
                status=ResolutionStatus.LOOKUP_FAILED,
                error=str(exc) or type(exc).__name__,
            )

        if feature is None:
            return ResolvedToken(
                token=token,
                status=ResolutionStatus.NOT_FOUND,
                needs_manual_creation=True,
            )

        return ResolvedToken(
            token=token,
            status=ResolutionStatus.PREVIEW,
            canonical_feature_id=feature.id,
            canonical_name=feature.name,
        )

    async def _attach(
        self,
        result: ResolvedToken,
        entity_id: str,
        feature_id: str,
    ) -> ResolvedToken:
        attachment = FeatureAttachment.from_token(result.token)
        try:
            record = await self._writer.attach_feature(
                entity_id, feature_id, attachment
            )
        except AttachFailed as exc:
            logger.warning(
                "Attach failed for %r → %s: %s",
                result.token.original_text,
                feature_id,
                exc,
            )
            result.status = ResolutionStatus.ATTACH_FAILED
            result.error = str(exc)
            return result
        except Exception as exc:
            logger.exception("Unexpected attach error for %r", result.token.original_text)
            result.status = ResolutionStatus.ATTACH_FAILED
            result.error = str(exc) or type(exc).__name__
            return result

        result.status = ResolutionStatus.ATTACHED
        result.attached = True
        result.record = record
        return result
