import logging

from llm_support.config import LOG_LEVEL


def setup_logging(name: str) -> logging.Logger:
    """Configures a standard logger."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s - [%(levelname)s] - %(message)s",
        datefmt="%H:%M:%S"
    )
    return logging.getLogger(name)
