from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional

import requests

from quiz_assistant.core.config import Settings
from quiz_assistant.core.errors import CorpusSchemaError, DataUnavailable, ShardGap
from quiz_assistant.core.types import Chunk, Corpus

logger = logging.getLogger(__name__)

METADATA_FILE = "metadata.json"
SEARCH_INDEX_FILE = "search-index.json"
SHARD_TEMPLATE = "chunks_{index}.json"


class _FetchError(Exception):
    pass


class CorpusStore:
    """
    Loads the preprocessed corpus from a static object store and keeps it for the
    lifetime of the instance.

    Layout under `base_url`: metadata.json (required), search-index.json (optional),
    chunks_0.json, chunks_1.json, ... (JSON arrays of chunk records). The number of
    shards is unknown, so shards are requested in order until `max_consecutive_misses`
    indices in a row fail, or `max_shards` indices have been tried.
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        max_shards: int = 50,
        max_consecutive_misses: int = 2,
    ):
        if max_shards < 1 or max_consecutive_misses < 1:
            raise ValueError("max_shards and max_consecutive_misses must be >= 1")
        self.base_url = base_url.rstrip("/") + "/"
        self.session = session or requests.Session()
        self.timeout = timeout
        self.max_shards = max_shards
        self.max_consecutive_misses = max_consecutive_misses

        self._lock = threading.Lock()
        self._corpus: Optional[Corpus] = None

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "CorpusStore":
        return cls(
            base_url=settings.corpus_base_url,
            session=session,
            timeout=settings.corpus_timeout,
            max_shards=settings.corpus_max_shards,
            max_consecutive_misses=settings.corpus_max_consecutive_misses,
        )

    @property
    def is_loaded(self) -> bool:
        return self._corpus is not None

    def load(self) -> Corpus:
        corpus = self._corpus
        if corpus is not None:
            return corpus
        with self._lock:
            # another thread may have finished loading while we waited
            if self._corpus is None:
                self._corpus = self._load_uncached()
            return self._corpus

    def invalidate(self) -> None:
        with self._lock:
            self._corpus = None

    def refresh(self) -> Corpus:
        self.invalidate()
        return self.load()

    # ------------------------------------------------------------------

    def _load_uncached(self) -> Corpus:
        logger.info("Loading corpus from %s", self.base_url)

        try:
            metadata = self._get_json(METADATA_FILE)
        except _FetchError as e:
            logger.error("Corpus metadata unavailable: %s", e)
            raise DataUnavailable(f"{METADATA_FILE} not available: {e}") from e
        if not isinstance(metadata, dict):
            raise CorpusSchemaError(f"{METADATA_FILE} must be a JSON object")

        search_index: Optional[Dict[str, Any]] = None
        try:
            raw_index = self._get_json(SEARCH_INDEX_FILE)
            if isinstance(raw_index, dict):
                search_index = raw_index
            else:
                logger.warning("%s is not a JSON object, ignoring it", SEARCH_INDEX_FILE)
        except _FetchError as e:
            logger.info("No search index (%s), continuing without it", e)

        chunks = self._load_shards()
        logger.info("Corpus loaded: %d chunks", len(chunks))
        return Corpus(metadata=metadata, search_index=search_index, chunks=tuple(chunks))

    def _load_shards(self) -> List[Chunk]:
        chunks: List[Chunk] = []
        misses = 0
        for index in range(self.max_shards):
            try:
                shard = self._fetch_shard(index)
            except ShardGap as gap:
                misses += 1
                logger.warning("Shard missing (%d in a row): %s", misses, gap)
                if misses >= self.max_consecutive_misses:
                    break
                continue
            misses = 0
            chunks.extend(shard)
            logger.info("Loaded %s: %d chunks", SHARD_TEMPLATE.format(index=index), len(shard))
        else:
            logger.warning("Stopped shard scan at the safety cap of %d shards", self.max_shards)
        return chunks

    def _fetch_shard(self, index: int) -> List[Chunk]:
        try:
            payload = self._get_json(SHARD_TEMPLATE.format(index=index))
        except _FetchError as e:
            raise ShardGap(index, str(e)) from e
        if not isinstance(payload, list):
            raise ShardGap(index, "payload is not a JSON array")
        try:
            return [Chunk.from_record(r) for r in payload]
        except CorpusSchemaError as e:
            raise ShardGap(index, e.message) from e

    def _get_json(self, name: str) -> Any:
        url = self.base_url + name
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise _FetchError(f"transport error: {e}") from e
        if not resp.ok:
            raise _FetchError(f"HTTP {resp.status_code}")
        try:
            return resp.json()
        except ValueError as e:
            raise _FetchError(f"invalid JSON: {e}") from e
