"""Model identifiers understood by the tokenizer selection helpers.

Any object with an ``as_str()`` method returning the canonical model name
satisfies ``LLMModel``, so provider-specific enums can be passed straight to
``select_tokenizer()`` without converting them to strings first.
"""

from enum import Enum
from typing import Protocol, runtime_checkable


@runtime_checkable
class LLMModel(Protocol):
    """Anything that can name its canonical model id."""

    def as_str(self) -> str:
        ...


class OpenAIModels(str, Enum):
    """Common OpenAI chat models.

    Example:
        >>> OpenAIModels.GPT4_32K.as_str()
        'gpt-4-32k'
    """

    GPT3_5_TURBO = "gpt-3.5-turbo"
    GPT4 = "gpt-4"
    GPT4_32K = "gpt-4-32k"
    GPT4_TURBO = "gpt-4-turbo"
    GPT4O = "gpt-4o"
    GPT4O_MINI = "gpt-4o-mini"
    O1 = "o1"
    O1_MINI = "o1-mini"

    def as_str(self) -> str:
        return self.value
