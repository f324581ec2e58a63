from __future__ import annotations

from typing import Optional, Sequence

from quiz_assistant.core.types import AnalysisContext, Question


EXTRACT_PROMPT = """Analizza l'immagine del quiz ed estrai TUTTE le domande.

Per ogni domanda, scrivi ESATTAMENTE in questo formato:

DOMANDA_1
TESTO: [scrivi il testo della domanda]
OPZIONE_A: [testo opzione A]
OPZIONE_B: [testo opzione B]
OPZIONE_C: [testo opzione C]
OPZIONE_D: [testo opzione D]
---
DOMANDA_2
TESTO: [scrivi il testo della domanda]
OPZIONE_A: [testo opzione A]
OPZIONE_B: [testo opzione B]
OPZIONE_C: [testo opzione C]
OPZIONE_D: [testo opzione D]
---

IMPORTANTE:
- Usa ESATTAMENTE questo formato
- Separa ogni domanda con tre trattini ---
- NON usare virgolette o caratteri speciali
- Scrivi tutto il testo in modo semplice"""


TOPIC_PROMPT = (
    "Guarda l'immagine del quiz e identifica l'argomento principale "
    "(es: supply chain, marketing, finanza, etc.). Rispondi solo con l'argomento."
)


def _context_block(context: AnalysisContext, page_count: Optional[int]) -> str:
    if not context:
        return "NOTA: Nessun contesto documento disponibile. Usa la tua conoscenza generale.\n\n"
    size = f" ({page_count} PAGINE)" if page_count else ""
    return f"""IMPORTANTE: USA QUESTO CONTESTO DAL DOCUMENTO DEL CORSO{size}:

{context.text}

ISTRUZIONI CRITICHE:
- DEVI basare le tue risposte PRINCIPALMENTE sul contesto fornito sopra
- Quando trovi informazioni nel contesto, cita SEMPRE la pagina specifica
- Se una risposta è nel contesto, dai accuratezza 90-100%
- Se NON trovi info nel contesto, puoi usare conoscenza generale ma indica "Fonte: Conoscenza generale" con accuratezza 50-70%

"""


def format_question(q: Question) -> str:
    lines = [f"Q{q.number}: {q.text}"]
    for label in sorted(q.options):
        lines.append(f"{label}) {q.options[label]}")
    return "\n".join(lines)


def _questions_block(questions: Sequence[Question]) -> str:
    if not questions:
        return "(Nessuna domanda estratta: leggi le domande direttamente dall'immagine.)"
    return "\n\n".join(format_question(q) for q in questions)


def _table_rows(questions: Sequence[Question]) -> str:
    if not questions:
        return """<tr>
<td class="question-number">[numero]</td>
<td class="answer-letter">[A/B/C/D]</td>
<td class="accuracy-percentage">[%]</td>
</tr>"""
    return "\n".join(
        f"""<tr>
<td class="question-number">{q.number}</td>
<td class="answer-letter">[A/B/C/D]</td>
<td class="accuracy-percentage">[%]</td>
</tr>"""
        for q in questions
    )


def build_analysis_prompt(
    questions: Sequence[Question],
    context: AnalysisContext,
    page_count: Optional[int] = None,
) -> str:
    source = "[Pagina X del documento]" if context else "Conoscenza generale"
    accuracy = (
        "USA IL CONTESTO DEL DOCUMENTO per dare risposte accurate con percentuali 85-100%"
        if context
        else "Senza documento, usa conoscenza generale con percentuali 40-70%"
    )
    return f"""{_context_block(context, page_count)}Analizza il quiz e fornisci le risposte.

DOMANDE:
{_questions_block(questions)}

GENERA:

1. TABELLA HTML:
<table class="quiz-results-table">
<thead>
<tr>
<th>N°</th>
<th>Risposta</th>
<th>Accuratezza</th>
</tr>
</thead>
<tbody>
{_table_rows(questions)}
</tbody>
</table>

2. ANALISI DETTAGLIATA per ogni domanda:
<div class="question-analysis">
<h4>Domanda [numero]</h4>
<p class="question-text">[testo domanda]</p>
<p class="answer-explanation"><strong>Risposta: [lettera]</strong> - [spiegazione]</p>
<p class="source-info">Fonte: {source}</p>
</div>

{accuracy}"""
