"""
English <-> German translation through an OpenAI-compatible chat API.

The client is optional: without an API key the app still runs and the
translate endpoint reports that translation is unavailable.
"""

import logging
import os
from typing import Any, Optional

import openai
from openai import OpenAI

from .errors import TranslationError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = os.environ.get("DT_TRANSLATION_MODEL", "gpt-4o-mini")
TARGET_LANGUAGES = ("German", "English")

SYSTEM_PROMPT = "You are a precise translator between English and German."
PROMPT_TEMPLATE = (
    'Translate the following text to {target}. Only return the translated text '
    'without any explanation or markdown formatting: "{text}"'
)


class Translator:
    """Wrapper around a chat-completions client that returns plain translated text."""

    def __init__(self, client: Any, model_name: str = DEFAULT_MODEL) -> None:
        self.client = client
        self.model_name = model_name

    def translate(self, text: Any, target: str = "German") -> str:
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("Text to translate is required")
        if target not in TARGET_LANGUAGES:
            raise ValidationError(f"target must be one of: {', '.join(TARGET_LANGUAGES)}")

        logger.debug("Translation request: model=%s target=%s chars=%d", self.model_name, target, len(text))
        try:
            response = self.client.chat.completions.create(
                model=self.model_name,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": PROMPT_TEMPLATE.format(target=target, text=text.strip())},
                ],
            )
        except openai.OpenAIError as e:
            raise TranslationError(f"Translation failed: {e}") from e

        try:
            content = response.choices[0].message.content or ""
        except (AttributeError, IndexError) as e:
            raise TranslationError("Unexpected response format from translation API") from e
        content = content.strip()
        if not content:
            raise TranslationError("Translation API returned an empty response")
        return content

    def to_german(self, text: str) -> str:
        return self.translate(text, "German")

    def to_english(self, text: str) -> str:
        return self.translate(text, "English")


def create_translator(
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    model_name: Optional[str] = None,
) -> Optional[Translator]:
    """Build a Translator from arguments or the environment; None if no key is available."""
    api_key = api_key or os.environ.get("OPENAI_API_KEY")
    if not api_key:
        logger.warning("No API key provided. Translation will be disabled.")
        return None
    base_url = base_url or os.environ.get("DT_TRANSLATION_BASE_URL") or None
    client = OpenAI(api_key=api_key, base_url=base_url) if base_url else OpenAI(api_key=api_key)
    translator = Translator(client, model_name or DEFAULT_MODEL)
    logger.info("Translation initialized with model: %s", translator.model_name)
    return translator
