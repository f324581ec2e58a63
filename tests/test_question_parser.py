import pytest

from quiz_assistant.core.errors import ExtractionParseFailure
from quiz_assistant.generation.question_parser import parse_questions, require_questions


def test_block_without_option_d_is_still_valid():
    raw = """DOMANDA_1
TESTO: Cos'è il lead time?
OPZIONE_A: Il tempo di consegna
OPZIONE_B: Il costo del magazzino
OPZIONE_C: La domanda media
---"""
    questions = parse_questions(raw)

    assert len(questions) == 1
    assert questions[0].text == "Cos'è il lead time?"
    assert questions[0].options == {
        "A": "Il tempo di consegna",
        "B": "Il costo del magazzino",
        "C": "La domanda media",
    }


def test_two_options_are_enough():
    raw = "TESTO: Vero o falso?\nOPZIONE_A: Vero\nOPZIONE_B: Falso"
    assert parse_questions(raw)[0].options == {"A": "Vero", "B": "Falso"}


def test_block_without_text_is_discarded():
    raw = """DOMANDA_1
OPZIONE_A: uno
OPZIONE_B: due
---
DOMANDA_2
TESTO: Seconda domanda
OPZIONE_A: uno
OPZIONE_B: due
---"""
    questions = parse_questions(raw)
    assert [q.text for q in questions] == ["Seconda domanda"]
    assert questions[0].number == 2


def test_block_with_a_single_option_is_discarded():
    raw = "TESTO: Domanda\nOPZIONE_A: unica"
    assert parse_questions(raw) == []


def test_number_falls_back_to_block_position():
    raw = """TESTO: broken
---
Here is another one:
TESTO: Quale modello?
OPZIONE_A: EOQ
OPZIONE_B: JIT
"""
    questions = parse_questions(raw)
    assert [(q.number, q.text) for q in questions] == [(2, "Quale modello?")]


def test_unrecognized_lines_and_indentation_are_tolerated():
    raw = """Ecco le domande estratte:

  DOMANDA_3
  TESTO:   Che cos'è la supply chain?
  Nota: la risposta è nel capitolo 2
  OPZIONE_A:  Una catena
  OPZIONE_B: Una rete
  OPZIONE_E: ignorata
  opzione_c: ignorata anche questa
---

"""
    questions = parse_questions(raw)

    assert len(questions) == 1
    q = questions[0]
    assert q.number == 1
    assert q.text == "Che cos'è la supply chain?"
    assert q.options == {"A": "Una catena", "B": "Una rete"}


def test_blank_option_lines_still_count():
    raw = "TESTO: Vero o falso?\nOPZIONE_A: Vero\nOPZIONE_B:"
    questions = parse_questions(raw)

    assert len(questions) == 1
    assert questions[0].options == {"A": "Vero", "B": ""}


def test_duplicate_markers_do_not_duplicate_numbers():
    raw = "DOMANDA_1\nTESTO: prima\nOPZIONE_A: a\nOPZIONE_B: b\n---\nDOMANDA_1\nTESTO: seconda\nOPZIONE_A: a\nOPZIONE_B: b"
    assert [q.number for q in parse_questions(raw)] == [1, 2]


def test_multiple_blocks_in_order():
    raw = "\n---\n".join(
        f"DOMANDA_{i}\nTESTO: domanda {i}\nOPZIONE_A: a\nOPZIONE_B: b\nOPZIONE_C: c\nOPZIONE_D: d"
        for i in range(1, 4)
    )
    questions = parse_questions(raw)
    assert [q.number for q in questions] == [1, 2, 3]
    assert all(len(q.options) == 4 for q in questions)


def test_require_questions_raises_when_nothing_usable():
    with pytest.raises(ExtractionParseFailure):
        require_questions("Mi dispiace, non riesco a leggere l'immagine.")
    with pytest.raises(ExtractionParseFailure):
        require_questions("")
