import pytest

from deutsch_tagebuch.text import (
    count_words, extract_sentences_with_term, is_candidate_word, is_stop_word, tokenize,
)


def test_tokenize_strips_punctuation() -> None:
    assert tokenize("Hallo, Welt! Wie geht's?") == ["Hallo", "Welt", "Wie", "gehts"]


def test_tokenize_german_quotes_and_hyphens() -> None:
    assert tokenize("„Guten Tag“, sagte er.") == ["Guten", "Tag", "sagte", "er"]
    assert tokenize("Der Kinder-garten") == ["Der", "Kindergarten"]
    assert tokenize("»Na so was« ‹ja›") == ["Na", "so", "was", "ja"]


@pytest.mark.parametrize("value", [None, "", "   ", 42, ["Haus"]])
def test_tokenize_non_text_gives_nothing(value: object) -> None:
    assert tokenize(value) == []


def test_tokenize_collapses_whitespace() -> None:
    assert tokenize("  Haus \n\t Garten  ") == ["Haus", "Garten"]


def test_tokenize_is_idempotent() -> None:
    text = "Heute (endlich!) war das Wetter schön; wir gingen in den Park."
    once = tokenize(text)
    assert tokenize(" ".join(once)) == once


def test_stop_words_are_case_insensitive() -> None:
    assert is_stop_word("Und")
    assert is_stop_word("ÜBER")
    assert not is_stop_word("Haus")


def test_candidate_words() -> None:
    assert is_candidate_word("Haus")
    assert is_candidate_word("groß")
    assert not is_candidate_word("Tag")  # too short
    assert not is_candidate_word("Sollte")  # stop word
    assert not is_candidate_word("  da  ")


def test_count_words() -> None:
    assert count_words("Ich habe einen Hund.") == 4
    assert count_words("   ") == 0


def test_extract_sentences_with_term() -> None:
    text = "Ich gehe heute. Morgen bleibe ich. Heute regnet es!"
    assert extract_sentences_with_term(text, "heute") == ["Ich gehe heute.", "Heute regnet es!"]


def test_extract_sentences_without_terminator() -> None:
    assert extract_sentences_with_term("Kein Punkt hier", "punkt") == ["Kein Punkt hier"]
    assert extract_sentences_with_term("Kein Punkt hier", "") == []
