"""
Surface-level German text helpers: tokenizing, stop words, sentence lookup.

Matching is purely on the written form. There is no stemming or
lemmatization, so "Haus" and "Häuser" are different words.
"""

import re
from typing import Any, List

# Common German function words that are never tracked as vocabulary
STOP_WORDS: frozenset[str] = frozenset({
    'ich', 'du', 'er', 'sie', 'es', 'wir', 'ihr', 'und', 'aber', 'oder',
    'denn', 'ist', 'bin', 'sind', 'war', 'waren', 'das', 'der', 'die',
    'den', 'dem', 'des', 'eine', 'ein', 'einer', 'eines', 'einem', 'einen',
    'zu', 'in', 'im', 'auf', 'mit', 'von', 'für', 'an', 'bei', 'nach',
    'aus', 'um', 'über', 'unter', 'durch', 'vor', 'hinter', 'neben',
    'zwischen', 'nicht', 'auch', 'nur', 'noch', 'schon', 'sehr', 'so',
    'wie', 'was', 'wer', 'wo', 'wann', 'warum', 'haben', 'hat', 'hatte',
    'hatten', 'sein', 'wird', 'werden', 'wurde', 'wurden', 'kann', 'könnte',
    'muss', 'soll', 'will', 'mag', 'darf', 'möchte', 'würde', 'sollte',
})

# Removed without a replacement space, so "Kinder-garten" becomes "Kindergarten".
# Includes German and French quotation marks: „ “ ” ‚ ‘ ’ » « › ‹
_PUNCTUATION = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()„“”‚‘’»«›‹?\"']")
_WHITESPACE = re.compile(r"\s+")
_SENTENCE = re.compile(r"[^.!?]+[.!?]+")

MIN_WORD_LENGTH = 4


def tokenize(text: Any) -> List[str]:
    """Split text into punctuation-free tokens. Non-string or empty input gives []."""
    if not text or not isinstance(text, str):
        return []
    stripped = _PUNCTUATION.sub("", text)
    return [token for token in _WHITESPACE.split(stripped) if token]


def is_stop_word(token: str) -> bool:
    return token.lower() in STOP_WORDS


def is_candidate_word(token: str) -> bool:
    """True if a trimmed token is long enough and not a stop word."""
    token = token.strip()
    return len(token) >= MIN_WORD_LENGTH and not is_stop_word(token)


def count_words(text: str) -> int:
    """Whitespace word count, as shown next to journal entries."""
    if not text or not text.strip():
        return 0
    return len(text.split())


def extract_sentences_with_term(text: str, term: str) -> List[str]:
    """Return the sentences of `text` that contain `term` (case-insensitive).

    Sentences end at '.', '!' or '?'. Text without any terminator is
    treated as a single sentence.
    """
    if not text or not term:
        return []
    sentences = _SENTENCE.findall(text) or [text]
    needle = term.lower()
    return [s.strip() for s in sentences if needle in s.lower()]
