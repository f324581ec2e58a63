from __future__ import annotations

import re
from typing import FrozenSet, Iterable, List

from quiz_assistant.core.types import Question


DEFAULT_DIACRITICS = "àèéìòù"
MIN_KEYWORD_LENGTH = 3      # tokens must be strictly longer than this
MAX_OPTION_KEYWORDS = 3


class KeywordExtractor:
    def __init__(
        self,
        diacritics: str = DEFAULT_DIACRITICS,
        min_length: int = MIN_KEYWORD_LENGTH,
        max_option_keywords: int = MAX_OPTION_KEYWORDS,
    ):
        self.min_length = min_length
        self.max_option_keywords = max_option_keywords
        # ASCII word characters plus whitespace plus the listed diacritics survive
        self._strip_re = re.compile(r"[^0-9A-Za-z_\s" + re.escape(diacritics) + r"]")

    def tokenize(self, text: str) -> List[str]:
        cleaned = self._strip_re.sub(" ", (text or "").lower())
        return [t for t in cleaned.split() if len(t) > self.min_length]

    def extract(self, questions: Iterable[Question]) -> FrozenSet[str]:
        keywords: set[str] = set()
        for q in questions:
            keywords.update(self.tokenize(q.text))
            for option in (q.options or {}).values():
                keywords.update(self.tokenize(option)[: self.max_option_keywords])
        return frozenset(keywords)


_default = KeywordExtractor()


def extract_keywords(questions: Iterable[Question]) -> FrozenSet[str]:
    return _default.extract(questions)
