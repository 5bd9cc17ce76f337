# backend/config.py

"""
Runtime configuration for SkillBridge Prep.

Values come from the process environment. A local `.env` file is loaded first
so developers can keep their OpenAI key out of the shell history.
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# --- Credentials ---

# The OpenAI Agents SDK reads this variable itself when a run is started.
OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY", "")

# --- Model ---

MODEL_NAME = os.environ.get("PREP_MODEL", "gpt-4o-mini")

# --- Server ---

HOST = os.environ.get("PREP_HOST", "localhost")
PORT = int(os.environ.get("PREP_PORT", "8080"))


def api_key_configured() -> bool:
    """Returns True when an OpenAI key is available to the generation agents."""
    return bool(os.environ.get("OPENAI_API_KEY", OPENAI_API_KEY))


if not api_key_configured():
    # Startup continues: every generation call will fail and fall back.
    logger.error("OPENAI_API_KEY is missing from environment variables.")
