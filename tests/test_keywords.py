from quiz_assistant.core.types import Question
from quiz_assistant.retrieval.keywords import KeywordExtractor, extract_keywords


def q(text, **options):
    return Question(number=1, text=text, options=options)


def test_short_tokens_are_never_keywords():
    kws = extract_keywords([q("il di the il di the supply")])
    assert kws == {"supply"}
    assert not {"il", "di", "the"} & kws


def test_question_text_is_lowercased_and_stripped_of_punctuation():
    kws = extract_keywords([q("Qual è il ruolo della Supply Chain?")])
    assert kws == {"qual", "ruolo", "della", "supply", "chain"}


def test_only_first_three_option_keywords_are_kept():
    kws = extract_keywords([q("xyz", A="a an alpha beta gamma delta epsilon")])
    assert kws == {"alpha", "beta", "gamma"}


def test_option_cap_applies_per_option():
    kws = extract_keywords([q("xyz", A="alpha beta gamma delta", B="omega sigma kappa lambda")])
    assert kws == {"alpha", "beta", "gamma", "omega", "sigma", "kappa"}


def test_italian_diacritics_survive_other_accents_split_words():
    kws = extract_keywords([q("Perché la qualità è così naïve?")])
    assert {"perché", "qualità", "così"} <= kws
    assert "naïve" not in kws


def test_apostrophes_split_and_word_chars_are_kept():
    kws = extract_keywords([q("Norma ISO_9001 dell'azienda")])
    assert kws == {"norma", "iso_9001", "dell", "azienda"}


def test_keywords_are_deduplicated_across_questions():
    kws = extract_keywords([q("supply chain"), q("Supply CHAIN!", A="supply management")])
    assert kws == {"supply", "chain", "management"}


def test_empty_input():
    assert extract_keywords([]) == frozenset()


def test_extractor_parameters():
    extractor = KeywordExtractor(min_length=5, max_option_keywords=1)
    kws = extractor.extract([q("supply chain network", A="logistics planning")])
    assert kws == {"supply", "network", "logistics"}
