from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

import openai
from openai import OpenAI

from quiz_assistant.core.errors import UpstreamCallFailure
from quiz_assistant.core.types import ImageInput

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    text: str
    content: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> "LLMResponse":
        return cls(text=text, content=[{"type": "text", "text": text}])


class VisionCompletion(Protocol):
    model: str

    def complete(
        self,
        image: ImageInput,
        prompt: str,
        *,
        stage: str,
        max_tokens: int,
        temperature: float,
    ) -> LLMResponse: ...


class OpenAIVisionLLM:
    def __init__(self, api_key: str, model: str, timeout: Optional[float] = None):
        # single attempt per call
        self.client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self.model = model

    def complete(
        self,
        image: ImageInput,
        prompt: str,
        *,
        stage: str,
        max_tokens: int,
        temperature: float,
    ) -> LLMResponse:
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "image_url", "image_url": {"url": image.as_url()}},
                            {"type": "text", "text": prompt},
                        ],
                    }
                ],
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except openai.OpenAIError as e:
            logger.error("Completion call failed at stage %s: %s", stage, e.__class__.__name__)
            raise UpstreamCallFailure(stage, f"Errore {stage}: chiamata al modello fallita ({e.__class__.__name__})") from e

        if not resp.choices:
            raise UpstreamCallFailure(stage, f"Errore {stage}: risposta vuota dal modello")
        return LLMResponse.from_text(resp.choices[0].message.content or "")
