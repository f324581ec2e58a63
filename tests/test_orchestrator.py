import pytest

from quiz_assistant.core.errors import UpstreamCallFailure
from quiz_assistant.core.types import ImageInput, PipelineStage as S
from quiz_assistant.generation.orchestrator import QuizOrchestrator

from fakes import EXTRACTION_REPLY, ScriptedLLM, corpus_files, make_store

IMAGE = ImageInput(media_type="image/png", data="aGVsbG8=")

LEAD_TIME_SHARDS = {
    0: [
        {"page": 12, "text": "Lead time is the delay between order and delivery."},
        {"page": 30, "text": "Inventory costs and warehouses."},
    ],
    1: [
        {"page": 45, "text": "Time management for projects."},
    ],
}


def test_grounded_answer_end_to_end():
    store = make_store(corpus_files(LEAD_TIME_SHARDS))
    llm = ScriptedLLM(EXTRACTION_REPLY, "<table>...</table>")

    result = QuizOrchestrator(llm, store).run(IMAGE)

    assert [f.page for f in result.context.fragments] == [12, 45]
    assert [f.score for f in result.context.fragments] == [20, 10]
    assert result.context.pages == (12, 45)

    meta = result.metadata
    assert meta.document_used is True
    assert meta.questions_analyzed == 1
    assert meta.chunks_used == 2
    assert meta.accuracy == "high"
    assert meta.model == "fake-vision-model"
    assert meta.processing_method == "with-documents"

    assert result.content == [{"type": "text", "text": "<table>...</table>"}]
    assert result.stages == (S.START, S.EXTRACT_QUESTIONS, S.QUESTIONS_FOUND, S.RETRIEVE, S.ANALYZE, S.DONE)

    analysis = llm.calls[1]
    assert "[Pagina 12] Lead time is the delay" in analysis["prompt"]
    assert "Q1: What is lead time?" in analysis["prompt"]
    assert "85-100%" in analysis["prompt"]
    assert "(3 PAGINE)" in analysis["prompt"]
    assert analysis["max_tokens"] == 4000
    assert analysis["temperature"] == 0.05


def test_without_corpus_accuracy_is_medium():
    files = corpus_files(LEAD_TIME_SHARDS)
    del files["metadata.json"]
    llm = ScriptedLLM(EXTRACTION_REPLY, "risposte")

    result = QuizOrchestrator(llm, make_store(files)).run(IMAGE)

    assert result.metadata.document_used is False
    assert result.metadata.chunks_used == 0
    assert result.metadata.accuracy == "medium"
    assert result.metadata.questions_analyzed == 1
    assert "Nessun contesto documento disponibile" in llm.calls[1]["prompt"]
    assert "40-70%" in llm.calls[1]["prompt"]


def test_no_matching_chunk_accuracy_is_medium():
    store = make_store(corpus_files({0: [{"page": 1, "text": "nothing relevant"}]}))
    llm = ScriptedLLM(EXTRACTION_REPLY, "risposte")

    result = QuizOrchestrator(llm, store).run(IMAGE)

    assert not result.context
    assert result.metadata.accuracy == "medium"
    assert result.stages[-3:] == (S.RETRIEVE, S.ANALYZE, S.DONE)


def test_topic_fallback_still_grounds_the_answer():
    store = make_store(corpus_files({0: [{"page": 3, "text": "Il marketing mix comprende le 4P."}]}))
    llm = ScriptedLLM("illeggibile", "Marketing", "risposte")

    result = QuizOrchestrator(llm, store).run(IMAGE)

    assert [q.text for q in result.questions] == ["marketing"]
    assert result.questions[0].options == {}
    assert result.metadata.accuracy == "high"
    assert result.stages[:5] == (S.START, S.EXTRACT_QUESTIONS, S.TOPIC_FALLBACK, S.QUESTIONS_FOUND, S.RETRIEVE)
    assert "Q1: marketing" in llm.calls[2]["prompt"]


def test_no_questions_skips_retrieval_and_answers_from_general_knowledge():
    store = make_store(corpus_files(LEAD_TIME_SHARDS))
    llm = ScriptedLLM(
        "illeggibile",
        UpstreamCallFailure("rilevamento argomento", "Errore rilevamento argomento"),
        "risposte",
    )

    result = QuizOrchestrator(llm, store).run(IMAGE)

    assert result.questions == ()
    assert result.metadata.questions_analyzed == 0
    assert result.metadata.accuracy == "medium"
    assert S.NO_QUESTIONS in result.stages
    assert result.stages[-1] == S.DONE
    assert "Nessuna domanda estratta" in llm.calls[2]["prompt"]


def test_failed_analysis_call_propagates():
    store = make_store(corpus_files(LEAD_TIME_SHARDS))
    llm = ScriptedLLM(EXTRACTION_REPLY, UpstreamCallFailure("analisi finale", "Errore analisi finale"))

    with pytest.raises(UpstreamCallFailure) as err:
        QuizOrchestrator(llm, store).run(IMAGE)
    assert err.value.stage == "analisi finale"


def test_corpus_is_loaded_once_across_requests():
    store = make_store(corpus_files(LEAD_TIME_SHARDS))
    llm = ScriptedLLM(EXTRACTION_REPLY, "uno", EXTRACTION_REPLY, "due")
    orchestrator = QuizOrchestrator(llm, store)

    orchestrator.run(IMAGE)
    orchestrator.run(IMAGE)

    assert store.session.names().count("metadata.json") == 1


def test_context_limit_is_applied():
    shards = {0: [{"page": i, "text": "lead time"} for i in range(50)]}
    llm = ScriptedLLM(EXTRACTION_REPLY, "risposte")

    result = QuizOrchestrator(llm, make_store(corpus_files(shards)), context_top_k=30).run(IMAGE)

    assert result.metadata.chunks_used == 30
    assert [f.page for f in result.context.fragments] == list(range(30))
