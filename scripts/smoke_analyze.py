import base64
import mimetypes
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from quiz_assistant.core.config import get_settings
from quiz_assistant.core.logging_utils import setup_logging
from quiz_assistant.core.types import ImageInput
from quiz_assistant.generation.orchestrator import QuizOrchestrator, summarize_stages
from quiz_assistant.generation.vision_client import OpenAIVisionLLM
from quiz_assistant.indexing.corpus_store import CorpusStore

load_dotenv()
settings = get_settings()
setup_logging(settings.log_level)

if len(sys.argv) < 2:
    print("Usage: python scripts/smoke_analyze.py <path_to_quiz_image>")
    raise SystemExit(1)

if not settings.openai_api_key:
    print("OPENAI_API_KEY is not set")
    raise SystemExit(1)

path = Path(sys.argv[1])
media_type = mimetypes.guess_type(path.name)[0] or "image/jpeg"
image = ImageInput(media_type=media_type, data=base64.b64encode(path.read_bytes()).decode("ascii"))

llm = OpenAIVisionLLM(api_key=settings.openai_api_key, model=settings.llm_model, timeout=settings.llm_timeout)
orchestrator = QuizOrchestrator.from_settings(settings, llm=llm, store=CorpusStore.from_settings(settings))

result = orchestrator.run(image)

print("STAGES:", summarize_stages(result.stages))
print("QUESTIONS:")
for q in result.questions:
    print(f"  Q{q.number}: {q.text} {q.options}")
print("PAGES:", list(result.context.pages))
print("METADATA:", result.metadata)
print("\nANSWER:\n", result.content[0]["text"] if result.content else "")
