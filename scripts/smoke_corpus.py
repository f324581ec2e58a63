import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from quiz_assistant.core.config import get_settings
from quiz_assistant.core.logging_utils import setup_logging
from quiz_assistant.core.types import Question
from quiz_assistant.indexing.corpus_store import CorpusStore
from quiz_assistant.retrieval.keyword_ranker import KeywordRanker
from quiz_assistant.retrieval.keywords import extract_keywords

load_dotenv()
settings = get_settings()
setup_logging(settings.log_level)

query = " ".join(sys.argv[1:]) or "Che cosa si intende per lead time nella supply chain?"

store = CorpusStore.from_settings(settings)
corpus = store.load()
print(f"Corpus: {len(corpus.chunks)} chunks, {corpus.page_count} pages, search index: {corpus.search_index is not None}")

keywords = extract_keywords([Question(number=1, text=query)])
print("KEYWORDS:", ", ".join(sorted(keywords)))

ranked = KeywordRanker().rank(corpus, keywords, limit=10)
print("TOP:")
for i, s in enumerate(ranked, start=1):
    print(i, f"page={s.page}", f"score={s.score}", "|", s.chunk.text[:80].replace("\n", " "), "|", s.matched_keywords)
