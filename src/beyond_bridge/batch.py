"""
Bulk translation into a target collection.

Usage:
    orchestrator = BatchOrchestrator(fetch_spell, translate_spell, collection)
    result = await orchestrator.translate_and_upsert([2618, 2619, 2620])
    print(result.created_count, result.updated_count, result.failures)

A failing item is recorded in ``BatchResult.failures`` and the batch moves
on; nothing raised by a fetch, translator or collection escapes
``translate_and_upsert``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from .activities.classifier import classify_entity
from .auth import AuthBroker, cache_id
from .models import PROVENANCE_SCOPE, TargetEntity
from .translators.base import AuthFailure, TranslationError

logger = logging.getLogger("beyond-bridge")

Fetcher = Callable[[Any], Awaitable[dict | None]]
Translator = Callable[[dict], TargetEntity]
Classifier = Callable[[TargetEntity, dict], TargetEntity]


class BatchFailure(BaseModel):
    """One item that could not be imported."""

    id: Any = Field(description="Source id of the failed item, None for run-level failures")
    message: str = Field(description="Human-readable reason")


class BatchResult(BaseModel):
    """Outcome of a batch run."""

    created_count: int = Field(default=0, description="Documents created")
    updated_count: int = Field(default=0, description="Existing documents updated in place")
    failures: list[BatchFailure] = Field(default_factory=list, description="Items that failed")
    cancelled: bool = Field(default=False, description="True if the run stopped on cancel()")

    @property
    def ok(self) -> bool:
        return not self.failures


@runtime_checkable
class TargetCollection(Protocol):
    """Persistence handle the batch writes into."""

    async def index(self) -> dict[Any, str]:
        """Map provenance sourceId to existing document id."""
        ...

    async def create(self, document: dict[str, Any]) -> str:
        ...

    async def update(self, document_id: str, document: dict[str, Any]) -> None:
        ...


class InMemoryCollection:
    """Dict-backed TargetCollection for dry runs and tests."""

    def __init__(self, documents: dict[str, dict[str, Any]] | None = None) -> None:
        self.documents: dict[str, dict[str, Any]] = dict(documents or {})
        self._next_id = len(self.documents) + 1

    async def index(self) -> dict[Any, str]:
        index: dict[Any, str] = {}
        for document_id, document in self.documents.items():
            block = document.get("flags", {}).get(PROVENANCE_SCOPE, {})
            source_id = block.get("sourceId")
            if source_id is not None:
                index[source_id] = document_id
        return index

    async def create(self, document: dict[str, Any]) -> str:
        document_id = f"doc-{self._next_id}"
        self._next_id += 1
        self.documents[document_id] = document
        return document_id

    async def update(self, document_id: str, document: dict[str, Any]) -> None:
        if document_id not in self.documents:
            raise KeyError(f"No document with id {document_id}")
        self.documents[document_id] = document


def failure_message(error: BaseException) -> str:
    """Readable message for a per-item failure."""
    if isinstance(error, TranslationError):
        return str(error)
    detail = str(error)
    return f"{type(error).__name__}: {detail}" if detail else type(error).__name__


class BatchOrchestrator:
    """Fetches, translates, classifies and upserts a list of source records."""

    def __init__(
        self,
        fetch: Fetcher,
        translator: Translator,
        collection: TargetCollection,
        *,
        concurrency: int = 5,
        classifier: Classifier | None = classify_entity,
    ) -> None:
        """
        Args:
            fetch: Async callable returning the provider record for a source id.
            translator: Entity translator (translate_spell, translate_item, ...).
            collection: Target collection to upsert into.
            concurrency: Maximum number of fetches in flight.
            classifier: Attaches activities to each entity; None skips classification.
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.fetch = fetch
        self.translator = translator
        self.collection = collection
        self.concurrency = concurrency
        self.classifier = classifier
        self._cancelled = False

    def cancel(self) -> None:
        """Stop the run before the next item. The item in progress completes."""
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    async def _fetch_all(self, source_ids: list[Any]) -> list[Any]:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def _fetch_one(source_id: Any) -> Any:
            async with semaphore:
                if self._cancelled:
                    return None
                return await self.fetch(source_id)

        return await asyncio.gather(*(_fetch_one(sid) for sid in source_ids), return_exceptions=True)

    def _translate(self, record: dict) -> TargetEntity:
        entity = self.translator(record)
        if self.classifier is not None:
            entity = self.classifier(entity, record)
        return entity

    async def translate_and_upsert(self, source_ids: list[Any]) -> BatchResult:
        """
        Import ``source_ids`` into the collection.

        Args:
            source_ids: Provider ids, processed in order.

        Returns:
            BatchResult with counts and per-item failures.
        """
        result = BatchResult()
        self._cancelled = False

        try:
            index = dict(await self.collection.index())
        except Exception as e:
            logger.error(f"Could not index target collection: {e}")
            result.failures.append(BatchFailure(id=None, message=f"Could not read target collection: {failure_message(e)}"))
            return result

        fetched = await self._fetch_all(list(source_ids))

        for source_id, record in zip(source_ids, fetched):
            if self._cancelled:
                logger.info("Batch cancelled, stopping before remaining items")
                result.cancelled = True
                break

            if isinstance(record, BaseException):
                logger.error(f"Failed to fetch source {source_id}: {record}")
                result.failures.append(BatchFailure(id=source_id, message=f"Fetch failed: {failure_message(record)}"))
                continue
            if not record:
                result.failures.append(BatchFailure(id=source_id, message="No record returned for this id"))
                continue

            try:
                entity = self._translate(record)
                document = entity.to_document()
                existing = index.get(entity.source_id)
                if existing is not None:
                    await self.collection.update(existing, document)
                    result.updated_count += 1
                else:
                    await self.collection.create(document)
                    result.created_count += 1
            except Exception as e:
                logger.warning(f"Failed to import source {source_id}: {e}")
                result.failures.append(BatchFailure(id=source_id, message=failure_message(e)))

        logger.info(
            f"Batch finished: {result.created_count} created, "
            f"{result.updated_count} updated, {len(result.failures)} failed"
        )
        return result


async def run_authenticated_batch(
    broker: AuthBroker,
    source_ids: list[Any],
    build: Callable[[str], BatchOrchestrator],
    credential: str | None = None,
) -> BatchResult:
    """
    Obtain a bearer token, then run a batch built around it.

    Args:
        broker: AuthBroker used to exchange the credential.
        source_ids: Provider ids to import.
        build: Creates the orchestrator for a bearer token (typically binding
            the token into the fetch callable).
        credential: Cobalt cookie; falls back to the configured one.

    Returns:
        BatchResult. Without a usable token the run is aborted with a single
        run-level failure.
    """
    key = cache_id(credential) if credential else "default"
    try:
        token = await broker.require_token(key, credential)
    except AuthFailure as e:
        logger.error(f"Batch aborted: {e}")
        return BatchResult(failures=[BatchFailure(id=None, message=str(e))])

    return await build(token).translate_and_upsert(source_ids)


__all__ = [
    "BatchFailure",
    "BatchOrchestrator",
    "BatchResult",
    "InMemoryCollection",
    "TargetCollection",
    "failure_message",
    "run_authenticated_batch",
]
