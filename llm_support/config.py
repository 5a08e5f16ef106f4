"""Central configuration for the llm_support helpers.

Contains:
- Tokenizer settings (default model, fallback encoding)
- Sampling parameter ranges (temperature, top-p)
- Schema output formatting
- Logging level

Values that differ per deployment can be overridden through a .env file
placed next to this module or through plain environment variables.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from the .env file (in llm_support/ directory)
load_dotenv(Path(__file__).parent / ".env")


# ============================================================================
# TOKENIZER SETTINGS
# ============================================================================

# Model used by count_tokens() when the caller does not name one
DEFAULT_TOKENIZER_MODEL = os.getenv("TOKENIZER_MODEL", "gpt-4o-mini")

# Encoding of the default chat model family, used for unknown model ids
FALLBACK_ENCODING = "cl100k_base"


# ============================================================================
# SAMPLING SETTINGS
# ============================================================================

# Percentage inputs are capped at this value (no lower cap)
PERCENT_MAX = 100

# (min, max) ranges that 0-100 percentages are mapped onto
TEMPERATURE_RANGE: tuple[int, int] = (0, 2)
TOP_P_RANGE: tuple[int, int] = (0, 1)


# ============================================================================
# SCHEMA SETTINGS
# ============================================================================

SCHEMA_INDENT = 2

# Named object shapes are emitted under this key and referenced via $ref
SCHEMA_DEFINITIONS_KEY = "definitions"

# Root-level keys removed from generated schemas before they reach a prompt
SCHEMA_STRIPPED_ROOT_KEYS = ("$schema", "title")


# ============================================================================
# LOGGING
# ============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
