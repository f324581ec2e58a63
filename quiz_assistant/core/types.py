from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from quiz_assistant.core.errors import CorpusSchemaError


@dataclass(frozen=True)
class Chunk:
    page: int
    text: str
    extra: Dict[str, Any] = field(default_factory=dict)  # auxiliary shard fields, opaque

    @classmethod
    def from_record(cls, record: Any) -> "Chunk":
        if not isinstance(record, Mapping):
            raise CorpusSchemaError(f"chunk record must be an object, got {type(record).__name__}")
        text = record.get("text")
        if not isinstance(text, str):
            raise CorpusSchemaError("chunk record has no string 'text'")
        page = record.get("page")
        if isinstance(page, bool) or page is None or (isinstance(page, float) and not page.is_integer()):
            raise CorpusSchemaError(f"chunk record has invalid 'page': {page!r}")
        try:
            page = int(page)
        except (TypeError, ValueError):
            raise CorpusSchemaError(f"chunk record has invalid 'page': {page!r}") from None
        extra = {k: v for k, v in record.items() if k not in ("page", "text")}
        return cls(page=page, text=text, extra=extra)


@dataclass(frozen=True)
class Corpus:
    metadata: Dict[str, Any]
    search_index: Optional[Dict[str, Any]]
    chunks: Tuple[Chunk, ...]

    @property
    def pages(self) -> List[int]:
        return list(dict.fromkeys(c.page for c in self.chunks))

    @property
    def page_count(self) -> int:
        return len(self.pages)


@dataclass(frozen=True)
class Question:
    number: int
    text: str
    options: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ScoredChunk:
    chunk: Chunk
    position: int                       # index in the corpus chunk sequence
    score: int
    matched_keywords: Tuple[str, ...]

    @property
    def page(self) -> int:
        return self.chunk.page


@dataclass(frozen=True)
class AnalysisContext:
    fragments: Tuple[ScoredChunk, ...] = ()
    text: str = ""
    pages: Tuple[int, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.text)


@dataclass(frozen=True)
class ImageInput:
    media_type: str = "image/jpeg"
    data: Optional[str] = None          # base64 payload
    url: Optional[str] = None

    def as_url(self) -> str:
        if self.url:
            return self.url
        return f"data:{self.media_type};base64,{self.data or ''}"


class PipelineStage(str, Enum):
    START = "start"
    EXTRACT_QUESTIONS = "extract_questions"
    TOPIC_FALLBACK = "topic_fallback"
    QUESTIONS_FOUND = "questions_found"
    NO_QUESTIONS = "no_questions"
    RETRIEVE = "retrieve"
    ANALYZE = "analyze"
    DONE = "done"


@dataclass(frozen=True)
class AnalysisMetadata:
    model: str
    document_used: bool
    questions_analyzed: int
    chunks_used: int
    accuracy: str                       # "high" | "medium"
    processing_method: str = "with-documents"


@dataclass(frozen=True)
class AnalysisResult:
    content: List[Dict[str, Any]]
    metadata: AnalysisMetadata
    questions: Tuple[Question, ...] = ()
    context: AnalysisContext = AnalysisContext()
    stages: Tuple[PipelineStage, ...] = ()
