"""
Parser for the delimited question format requested by EXTRACT_PROMPT.

    response := block ("---" block)*
    block    := line*
    line     := "TESTO:" value | "OPZIONE_" [A-D] ":" value | other

A block becomes a Question only if it has a non-empty TESTO and at least
MIN_OPTIONS option lines; any other block is dropped. An option line counts
even when its value is blank. Questions are numbered by the position of their
block, so "DOMANDA_<n>" markers and other unmatched lines are ignored. The
model is asked for this format but does not always comply, so parsing is
best-effort.
"""
from __future__ import annotations

import re
from typing import Dict, List, Optional

from quiz_assistant.core.errors import ExtractionParseFailure
from quiz_assistant.core.types import Question


BLOCK_DELIMITER = "---"
MIN_OPTIONS = 2

_TEXT_RE = re.compile(r"^TESTO:(.*)$")
_OPTION_RE = re.compile(r"^OPZIONE_([A-D]):(.*)$")


def split_blocks(response: str) -> List[str]:
    return [b for b in response.split(BLOCK_DELIMITER) if b.strip()]


def parse_block(block: str, position: int) -> Optional[Question]:
    text = ""
    options: Dict[str, str] = {}

    for raw in block.strip().splitlines():
        line = raw.strip()
        m = _TEXT_RE.match(line)
        if m:
            text = m.group(1).strip()
            continue
        m = _OPTION_RE.match(line)
        if m:
            options[m.group(1)] = m.group(2).strip()

    if not text or len(options) < MIN_OPTIONS:
        return None
    return Question(number=position, text=text, options=options)


def parse_questions(response: str) -> List[Question]:
    questions: List[Question] = []
    for position, block in enumerate(split_blocks(response or ""), start=1):
        q = parse_block(block, position)
        if q is not None:
            questions.append(q)
    return questions


def require_questions(response: str) -> List[Question]:
    questions = parse_questions(response)
    if not questions:
        raise ExtractionParseFailure("no valid question block in the extraction response")
    return questions
