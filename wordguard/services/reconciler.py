"""Bulk reconciliation — merge import candidates into the dictionary.

Candidates are processed one at a time in input order against a snapshot of
the store taken at the start of the run:

1. an empty word is invalid: counted as ``skipped`` when the policy skips
   invalid records, otherwise reported in ``errors``; never written
2. language, category and variations are normalised
3. a new identity is inserted (``imported``)
4. an identity already in the store is overwritten (``updated``) or left
   alone (``skipped``) depending on ``overwrite_existing``
5. an identity inserted earlier in the same batch is overwritten in place by
   the later candidate; that write counts as ``updated`` so the totals still
   add up

A record the store refuses is reported in ``errors`` and the run carries on.

The run is not transactional. If the store goes away part-way through, the
``StoreUnavailableError`` is re-raised with ``partial_result`` describing what
was already written. Nothing is retried here.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from wordguard.errors import (
    DuplicateWordError,
    InvalidWordError,
    StoreUnavailableError,
    WordNotFoundError,
    WordRejectedError,
)
from wordguard.models.dictionary import (
    ImportCandidate,
    ImportPolicy,
    ReconciliationResult,
    WordEntry,
)
from wordguard.services.normalizer import (
    identity_key,
    normalize_category,
    normalize_language,
    normalize_variations,
    normalize_word,
)
from wordguard.services.store import DictionaryStore

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]
ContinueCheck = Callable[[], bool]

IdentityKey = tuple[str, str]


class _Batch:
    """Mutable state of one import run."""

    def __init__(self, existing: list[WordEntry], policy: ImportPolicy) -> None:
        self.policy = policy
        self.existing: dict[IdentityKey, WordEntry] = {e.identity: e for e in existing}
        self.inserted: dict[IdentityKey, WordEntry] = {}
        self.result = ReconciliationResult()

    def record_error(self, index: int, candidate: ImportCandidate, reason: str) -> None:
        label = f'"{candidate.word}"' if candidate.word and candidate.word.strip() else "(empty)"
        self.result.errors.append(f"Record {index} {label}: {reason}")


async def _reconcile_one(
    store: DictionaryStore,
    batch: _Batch,
    index: int,
    candidate: ImportCandidate,
) -> None:
    result = batch.result
    try:
        word = normalize_word(candidate.word)
    except InvalidWordError as exc:
        if batch.policy.skip_invalid:
            result.skipped += 1
        else:
            batch.record_error(index, candidate, str(exc))
        return

    language = normalize_language(candidate.language)
    category = normalize_category(candidate.category)
    variations = normalize_variations(candidate.variations)
    key = identity_key(word, language)

    try:
        if key in batch.inserted:
            earlier = batch.inserted[key]
            replacement = earlier.model_copy(
                update={"word": word, "category": category, "variations": variations}
            )
            batch.inserted[key] = await store.update(earlier.id, replacement)
            result.updated += 1
            logger.debug("Record %d overrides earlier batch entry %r", index, word)
        elif key in batch.existing:
            if not batch.policy.overwrite_existing:
                result.skipped += 1
                return
            current = batch.existing[key]
            replacement = current.model_copy(update={"category": category, "variations": variations})
            batch.existing[key] = await store.update(current.id, replacement)
            result.updated += 1
        else:
            entry = WordEntry(word=word, language=language, category=category, variations=variations)
            batch.inserted[key] = await store.insert(entry)
            result.imported += 1
    except DuplicateWordError:
        # Another writer created this identity after our snapshot.
        batch.record_error(index, candidate, "word was added concurrently by another writer")
    except WordNotFoundError:
        batch.record_error(index, candidate, "existing entry was removed during import")
    except WordRejectedError as exc:
        batch.record_error(index, candidate, str(exc))


async def import_words(
    candidates: Sequence[ImportCandidate],
    policy: ImportPolicy,
    store: DictionaryStore,
    *,
    progress: ProgressCallback | None = None,
    should_continue: ContinueCheck | None = None,
) -> ReconciliationResult:
    """Reconcile *candidates* against *store* under *policy*.

    *progress* is called with ``(done, total)`` after each record and is
    advisory only. *should_continue* is checked before each record; returning
    ``False`` stops the run and the partial result comes back with
    ``completed=False``.
    """
    try:
        existing = await store.fetch_all()
    except StoreUnavailableError as exc:
        exc.partial_result = ReconciliationResult(completed=False)
        raise

    batch = _Batch(existing, policy)
    result = batch.result
    count = len(candidates)

    for index, candidate in enumerate(candidates, start=1):
        if should_continue is not None and not should_continue():
            result.completed = False
            logger.warning("Import cancelled after %d of %d record(s)", result.total, count)
            break
        try:
            await _reconcile_one(store, batch, index, candidate)
        except StoreUnavailableError as exc:
            result.completed = False
            exc.partial_result = result
            logger.error(
                "Import aborted at record %d of %d: %s (imported=%d updated=%d)",
                index,
                count,
                exc,
                result.imported,
                result.updated,
            )
            raise
        result.total += 1
        if progress is not None:
            progress(index, count)

    logger.info(
        "Import finished: total=%d imported=%d updated=%d skipped=%d errors=%d",
        result.total,
        result.imported,
        result.updated,
        result.skipped,
        len(result.errors),
    )
    return result
