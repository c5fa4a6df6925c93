"""Token counting using the tiktoken local tokenizer.

Encodings are loaded lazily and cached per name, so constructing a
``TokenCounter`` is cheap and counting an empty string never touches the
tokenizer files.
"""

from __future__ import annotations

import functools

import tiktoken

from suggestion_meter.configs.system import TokenizerConfig


class TokenizerError(Exception):
    """Raised when text cannot be tokenized (bad encoding name, encode failure)."""


@functools.lru_cache(maxsize=8)
def _load_encoding(model_name: str | None, encoding_name: str) -> tiktoken.Encoding:
    if model_name:
        return tiktoken.encoding_for_model(model_name)
    return tiktoken.get_encoding(encoding_name)


class TokenCounter:
    """Counts tokens with a fixed, named tiktoken vocabulary."""

    def __init__(
        self,
        model_name: str | None = "gpt-3.5-turbo",
        encoding_name: str = "cl100k_base",
    ) -> None:
        self.model_name = model_name
        self.encoding_name = encoding_name

    @classmethod
    def from_config(cls, config: TokenizerConfig) -> TokenCounter:
        return cls(model_name=config.model_name, encoding_name=config.encoding_name)

    def count(self, text: str) -> int:
        """Return the number of tokens in ``text``.  Empty input yields 0.

        Raises:
            TokenizerError: when the encoding cannot be loaded or applied.
        """
        if not text:
            return 0
        try:
            encoding = _load_encoding(self.model_name, self.encoding_name)
            # Special-token markers inside captured code are ordinary text here.
            return len(encoding.encode(text, disallowed_special=()))
        except Exception as exc:
            raise TokenizerError(
                f"Failed to tokenize {len(text)} chars "
                f"(model={self.model_name}, encoding={self.encoding_name}): {exc}"
            ) from exc
