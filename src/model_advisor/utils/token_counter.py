"""Token counting with an exact tokenizer and a character-ratio fallback."""

import asyncio
import logging
import math
from typing import Protocol

import tiktoken

from model_advisor.config import settings

logger = logging.getLogger(__name__)


class TokenCounter(Protocol):
    async def count_tokens(self, text: str) -> int:
        ...


def approximate_token_count(text: str, chars_per_token: float | None = None) -> int:
    """Estimate tokens from character count. Never raises."""
    if not text or not isinstance(text, str):
        return 0
    ratio = chars_per_token or settings.APPROX_CHARS_PER_TOKEN
    if ratio <= 0:
        ratio = 4.0
    return math.ceil(len(text) / ratio)


class TiktokenCounter:
    """Exact token counts from a tiktoken encoding.

    The encoding is loaded lazily; the first load may download the BPE file,
    so counting runs in a worker thread.
    """

    def __init__(self, encoding_name: str | None = None):
        self.encoding_name = encoding_name or settings.TOKENIZER_ENCODING
        self._encoding: tiktoken.Encoding | None = None

    def _encode_length(self, text: str) -> int:
        if self._encoding is None:
            self._encoding = tiktoken.get_encoding(self.encoding_name)
        return len(self._encoding.encode(text, disallowed_special=()))

    async def count_tokens(self, text: str) -> int:
        if not text:
            return 0
        return await asyncio.to_thread(self._encode_length, text)


_default_counter: TiktokenCounter | None = None


def get_default_counter() -> TiktokenCounter:
    global _default_counter
    if _default_counter is None:
        _default_counter = TiktokenCounter()
    return _default_counter


async def count_tokens_with_fallback(text: str, counter: TokenCounter | None = None) -> tuple[int, str]:
    """Count tokens exactly, falling back to the approximation on any failure.

    The exact counter is tried once; there is no retry.

    Returns:
        Tuple of (token count, method) where method is "exact" or "approximate".
    """
    if counter is None:
        if not settings.EXACT_TOKEN_COUNT_ENABLED:
            return approximate_token_count(text), "approximate"
        counter = get_default_counter()

    try:
        count = await counter.count_tokens(text)
        return max(0, int(count)), "exact"
    except Exception as e:
        logger.warning(f"Exact token count failed, using approximation: {e}")
        return approximate_token_count(text), "approximate"
