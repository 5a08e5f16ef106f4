"""Tokenizer selection for token counting.

## Library Usage

Uses `tiktoken` for the byte-pair encodings. `tiktoken.encoding_for_model()`
knows which encoding each OpenAI model id uses; ids it does not recognize
(other providers, new releases, typos) fall back to the cl100k_base encoding
of the default chat model family instead of failing the caller.

Encodings are built on every call. Callers that count tokens in a loop should
keep the returned Tokenizer around themselves.

## Data Flow

1. Caller passes a model id string or an LLMModel (anything with as_str())
2. select_tokenizer() resolves the native encoding, or the fallback
3. Tokenizer.count() / Tokenizer.split() operate on prompt text
"""

from dataclasses import dataclass
from typing import Union

import tiktoken

from llm_support.config import DEFAULT_TOKENIZER_MODEL, FALLBACK_ENCODING
from llm_support.shared.logging_utils import setup_logging
from llm_support.shared.models import LLMModel


logger = setup_logging(__name__)

ModelId = Union[str, LLMModel]


class TokenizerError(Exception):
    """Base exception for tokenizer selection errors."""
    pass


class TokenizerUnavailableError(TokenizerError):
    """Raised when not even the fallback encoding can be constructed."""
    pass


@dataclass(frozen=True)
class Tokenizer:
    """Byte-pair tokenizer bound to a single tiktoken encoding.

    Attributes:
        encoding: The underlying tiktoken Encoding.
    """

    encoding: tiktoken.Encoding

    @property
    def name(self) -> str:
        return self.encoding.name

    def encode(self, text: str) -> list[int]:
        # Special tokens in user text are encoded as such, not rejected
        return self.encoding.encode(text, allowed_special="all")

    def split_bytes(self, text: str) -> list[bytes]:
        """Split text into the raw byte chunks of its tokens.

        Always lossless: b"".join(chunks) == text.encode("utf-8").
        """
        return self.encoding.decode_tokens_bytes(self.encode(text))

    def split(self, text: str) -> list[str]:
        """Split text into the ordered token strings the encoding produces.

        Raises:
            UnicodeDecodeError: If a token holds only part of a multi-byte
                character (some emoji and CJK text). Use split_bytes() there.

        Example:
            >>> select_tokenizer("gpt-4").split("This is a test")
            ['This', ' is', ' a', ' test']
        """
        return [chunk.decode("utf-8") for chunk in self.split_bytes(text)]

    def count(self, text: str) -> int:
        return len(self.encode(text))


def _model_name(model: ModelId) -> str:
    if isinstance(model, LLMModel):
        return model.as_str()
    return model


def select_tokenizer(model: ModelId) -> Tokenizer:
    """Return a tokenizer for the model's native encoding.

    Unrecognized model ids get the cl100k_base encoding rather than an error,
    so token budgeting keeps working for models tiktoken has never heard of.

    Args:
        model: Model id (e.g. "gpt-4o") or any object exposing as_str().

    Returns:
        Tokenizer for the native encoding, or the fallback encoding.

    Raises:
        TokenizerUnavailableError: If the fallback encoding cannot be loaded
            either (e.g. encoding data missing and no network).

    Example:
        >>> select_tokenizer("gpt-4o").name
        'o200k_base'
        >>> select_tokenizer("my-local-llama").name
        'cl100k_base'
    """
    model_name = _model_name(model)
    try:
        encoding = tiktoken.encoding_for_model(model_name)
    except (KeyError, ValueError, OSError) as exc:
        logger.debug(
            f"[TOKENIZER] No usable encoding for '{model_name}' ({exc!r}), "
            f"falling back to {FALLBACK_ENCODING}"
        )
        encoding = _fallback_encoding()
    return Tokenizer(encoding)


def _fallback_encoding() -> tiktoken.Encoding:
    try:
        return tiktoken.get_encoding(FALLBACK_ENCODING)
    except (KeyError, ValueError, OSError) as exc:
        raise TokenizerUnavailableError(
            f"Fallback encoding {FALLBACK_ENCODING} could not be loaded: {exc}"
        ) from exc


def count_tokens(text: str, model: ModelId = DEFAULT_TOKENIZER_MODEL) -> int:
    if not text:
        return 0
    return select_tokenizer(model).count(text)
