"""Unit tests for token counting and the approximation fallback."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from model_advisor.config import settings
from model_advisor.utils.token_counter import (
    TiktokenCounter,
    approximate_token_count,
    count_tokens_with_fallback,
)


class TestApproximateTokenCount:
    """Tests for approximate_token_count."""

    def test_empty_text_is_zero(self):
        assert approximate_token_count("") == 0

    def test_none_is_zero(self):
        assert approximate_token_count(None) == 0

    def test_four_chars_per_token(self):
        assert approximate_token_count("abcd" * 10) == 10

    def test_rounds_up_partial_tokens(self):
        assert approximate_token_count("abcde") == 2

    def test_custom_ratio(self):
        assert approximate_token_count("abcdef", chars_per_token=2) == 3

    def test_is_deterministic(self):
        text = "The quick brown fox jumps over the lazy dog."
        assert approximate_token_count(text) == approximate_token_count(text)


class TestCountTokensWithFallback:
    """Tests for count_tokens_with_fallback."""

    @pytest.mark.asyncio
    async def test_uses_exact_counter(self):
        counter = MagicMock()
        counter.count_tokens = AsyncMock(return_value=42)

        count, method = await count_tokens_with_fallback("some text", counter)

        assert (count, method) == (42, "exact")
        counter.count_tokens.assert_awaited_once_with("some text")

    @pytest.mark.asyncio
    async def test_falls_back_once_on_error(self):
        counter = MagicMock()
        counter.count_tokens = AsyncMock(side_effect=TimeoutError("service unavailable"))

        count, method = await count_tokens_with_fallback("abcd" * 5, counter)

        assert (count, method) == (5, "approximate")
        assert counter.count_tokens.await_count == 1

    @pytest.mark.asyncio
    async def test_failure_is_logged(self, caplog):
        counter = MagicMock()
        counter.count_tokens = AsyncMock(side_effect=RuntimeError("boom"))

        with caplog.at_level("WARNING"):
            await count_tokens_with_fallback("hello", counter)

        assert "boom" in caplog.text

    @pytest.mark.asyncio
    async def test_negative_exact_count_clamped(self):
        counter = MagicMock()
        counter.count_tokens = AsyncMock(return_value=-3)

        count, _ = await count_tokens_with_fallback("x", counter)
        assert count == 0

    @pytest.mark.asyncio
    async def test_disabled_exact_counting_uses_approximation(self):
        # conftest disables exact counting for every test
        assert settings.EXACT_TOKEN_COUNT_ENABLED is False

        count, method = await count_tokens_with_fallback("abcd" * 3)
        assert (count, method) == (3, "approximate")

    @pytest.mark.asyncio
    async def test_default_counter_used_when_enabled(self, monkeypatch):
        monkeypatch.setattr(settings, "EXACT_TOKEN_COUNT_ENABLED", True)
        counter = MagicMock()
        counter.count_tokens = AsyncMock(return_value=7)

        with patch("model_advisor.utils.token_counter.get_default_counter", return_value=counter):
            count, method = await count_tokens_with_fallback("anything")

        assert (count, method) == (7, "exact")


class TestTiktokenCounter:
    """Tests for TiktokenCounter with the encoding mocked out."""

    @pytest.mark.asyncio
    async def test_counts_encoded_tokens(self):
        encoding = MagicMock()
        encoding.encode.return_value = [1, 2, 3]

        with patch("model_advisor.utils.token_counter.tiktoken.get_encoding", return_value=encoding) as get_encoding:
            counter = TiktokenCounter("o200k_base")
            assert await counter.count_tokens("hi there") == 3
            assert await counter.count_tokens("again") == 3

        get_encoding.assert_called_once_with("o200k_base")

    @pytest.mark.asyncio
    async def test_empty_text_skips_encoding(self):
        with patch("model_advisor.utils.token_counter.tiktoken.get_encoding") as get_encoding:
            assert await TiktokenCounter().count_tokens("") == 0

        get_encoding.assert_not_called()

    def test_uses_configured_encoding(self):
        assert TiktokenCounter().encoding_name == settings.TOKENIZER_ENCODING
