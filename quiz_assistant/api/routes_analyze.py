from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache

from fastapi import APIRouter, Depends, Response

from quiz_assistant.api.schemas import AnalyzeRequest, AnalyzeResponse, DocumentsInfo, ErrorResponse, HealthResponse
from quiz_assistant.core.config import Settings, get_settings
from quiz_assistant.core.errors import CredentialMissing, DataUnavailable, ImageMissing
from quiz_assistant.generation.orchestrator import QuizOrchestrator, summarize_stages
from quiz_assistant.generation.vision_client import OpenAIVisionLLM, VisionCompletion
from quiz_assistant.indexing.corpus_store import CorpusStore

logger = logging.getLogger(__name__)
router = APIRouter()

ROUTE = "/api/analyze-with-docs"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


# Shared clients
_store = CorpusStore.from_settings(get_settings())


def get_corpus_store() -> CorpusStore:
    return _store


@lru_cache(maxsize=4)
def _vision_llm(api_key: str, model: str, timeout: float) -> OpenAIVisionLLM:
    return OpenAIVisionLLM(api_key=api_key, model=model, timeout=timeout)


def get_llm(settings: Settings = Depends(get_settings)) -> VisionCompletion:
    if not settings.openai_api_key:
        raise CredentialMissing("OPENAI_API_KEY non configurata")
    return _vision_llm(settings.openai_api_key, settings.llm_model, settings.llm_timeout)


def get_orchestrator(
    settings: Settings = Depends(get_settings),
    llm: VisionCompletion = Depends(get_llm),
    store: CorpusStore = Depends(get_corpus_store),
) -> QuizOrchestrator:
    return QuizOrchestrator.from_settings(settings, llm=llm, store=store)


@router.options(ROUTE)
def preflight() -> Response:
    return Response(status_code=200)


@router.get(ROUTE, response_model=HealthResponse)
def status(
    settings: Settings = Depends(get_settings),
    store: CorpusStore = Depends(get_corpus_store),
) -> HealthResponse:
    has_key = bool(settings.openai_api_key)
    try:
        corpus = store.load()
    except DataUnavailable:
        corpus = None
    has_data = corpus is not None and len(corpus.chunks) > 0

    return HealthResponse(
        status="ok",
        message="Quiz Assistant API - Con Documenti",
        timestamp=utc_timestamp(),
        apiKeyConfigured=has_key,
        documentsLoaded=has_data,
        documentsInfo=DocumentsInfo(chunks=len(corpus.chunks), pages=corpus.page_count) if has_data else None,
        githubUrl=store.base_url,
        instructions=(
            "API pronta con documenti. Accuratezza migliorata!"
            if has_key and has_data
            else "Configura OPENAI_API_KEY e carica i documenti su GitHub"
        ),
    )


@router.post(
    ROUTE,
    response_model=AnalyzeResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def analyze(
    req: AnalyzeRequest,
    orchestrator: QuizOrchestrator = Depends(get_orchestrator),
) -> AnalyzeResponse:
    image = req.find_image()
    if image is None:
        raise ImageMissing("Immagine non trovata")

    logger.info("Starting quiz analysis with documents")
    result = orchestrator.run(image)
    logger.info("Pipeline: %s", summarize_stages(result.stages))
    return AnalyzeResponse.from_result(result)

