"""Local configuration for mdcommands."""

from __future__ import annotations

import os
from pathlib import Path


DEFAULT_MARKDOWN_DIR = "."
DEFAULT_LLM_BASE_URL = "https://api.openai.com/v1"
DEFAULT_LLM_MODEL = "gpt-4o"
DEFAULT_LLM_TEMPERATURE = 0.7
DEFAULT_LLM_MAX_COMPLETION_TOKENS = 4096
DEFAULT_LLM_MAX_INPUT_TOKENS = 100_000
DEFAULT_LLM_TIMEOUT_S = 120.0
DEFAULT_LLM_MAX_RETRIES = 2
DEFAULT_LLM_BACKOFF_S = 0.5
DEFAULT_MAX_TEXT_LENGTH = 128
DEFAULT_MAX_LOG_ENTRY_LENGTH = 2000
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_USER_AGENT = "mdcommands/0.1"
DEFAULT_SERVER_HOST = "127.0.0.1"
DEFAULT_SERVER_PORT = 8000

# Relative Markdown paths given to file_io resolve against this directory.
MDCOMMANDS_MARKDOWN_DIR = Path(os.getenv("MDCOMMANDS_MARKDOWN_DIR", DEFAULT_MARKDOWN_DIR)).expanduser().resolve()

MDCOMMANDS_LLM_API_KEY = os.getenv("MDCOMMANDS_LLM_API_KEY", os.getenv("OPENAI_API_KEY", ""))
MDCOMMANDS_LLM_BASE_URL = os.getenv("MDCOMMANDS_LLM_BASE_URL", DEFAULT_LLM_BASE_URL)
MDCOMMANDS_LLM_MODEL = os.getenv("MDCOMMANDS_LLM_MODEL", DEFAULT_LLM_MODEL)
MDCOMMANDS_LLM_TEMPERATURE = float(os.getenv("MDCOMMANDS_LLM_TEMPERATURE", str(DEFAULT_LLM_TEMPERATURE)))
MDCOMMANDS_LLM_MAX_COMPLETION_TOKENS = int(
    os.getenv("MDCOMMANDS_LLM_MAX_COMPLETION_TOKENS", str(DEFAULT_LLM_MAX_COMPLETION_TOKENS))
)
MDCOMMANDS_LLM_MAX_INPUT_TOKENS = int(os.getenv("MDCOMMANDS_LLM_MAX_INPUT_TOKENS", str(DEFAULT_LLM_MAX_INPUT_TOKENS)))
MDCOMMANDS_LLM_TIMEOUT_S = float(os.getenv("MDCOMMANDS_LLM_TIMEOUT_S", str(DEFAULT_LLM_TIMEOUT_S)))
MDCOMMANDS_LLM_MAX_RETRIES = int(os.getenv("MDCOMMANDS_LLM_MAX_RETRIES", str(DEFAULT_LLM_MAX_RETRIES)))
MDCOMMANDS_LLM_BACKOFF_S = float(os.getenv("MDCOMMANDS_LLM_BACKOFF_S", str(DEFAULT_LLM_BACKOFF_S)))

# Text values longer than this are cut in the copy of the tree sent to the model.
MDCOMMANDS_MAX_TEXT_LENGTH = int(os.getenv("MDCOMMANDS_MAX_TEXT_LENGTH", str(DEFAULT_MAX_TEXT_LENGTH)))

MDCOMMANDS_MAX_LOG_ENTRY_LENGTH = int(os.getenv("MDCOMMANDS_MAX_LOG_ENTRY_LENGTH", str(DEFAULT_MAX_LOG_ENTRY_LENGTH)))
MDCOMMANDS_LOG_LEVEL = os.getenv("MDCOMMANDS_LOG_LEVEL", DEFAULT_LOG_LEVEL)
MDCOMMANDS_USER_AGENT = os.getenv("MDCOMMANDS_USER_AGENT", DEFAULT_USER_AGENT)

# HTTP API bind address. Falls back to HOST, PORT and RELOAD.
MDCOMMANDS_SERVER_HOST = os.getenv("MDCOMMANDS_SERVER_HOST", os.getenv("HOST", DEFAULT_SERVER_HOST))
MDCOMMANDS_SERVER_PORT = int(os.getenv("MDCOMMANDS_SERVER_PORT", os.getenv("PORT", str(DEFAULT_SERVER_PORT))))
MDCOMMANDS_SERVER_RELOAD = os.getenv("MDCOMMANDS_SERVER_RELOAD", os.getenv("RELOAD", "false")).lower() in {
    "1",
    "true",
    "yes",
}
