# Shared helpers for the LLM request/response pipeline

from .logging_utils import setup_logging

# Structured output schemas
from .schemas import (
    derive_schema,
    fix_opaque_values,
    serialize_schema,
    Primitive,
    ObjectShape,
    OptionalField,
    ArrayOf,
    OpaqueValue,
    Ref,
    TypeDescriptor,
    SchemaError,
    SchemaDerivationError,
    SchemaSerializationError,
)

# Token counting
from .models import LLMModel, OpenAIModels
from .tokens import (
    select_tokenizer,
    count_tokens,
    Tokenizer,
    TokenizerError,
    TokenizerUnavailableError,
)

# Sampling parameters
from .sampling import map_to_range, percent_to_temperature, percent_to_top_p

# Model output cleanup
from .json_output import remove_json_wrapper, parse_json_output, JsonOutputError
