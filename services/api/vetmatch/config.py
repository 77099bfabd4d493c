"""
Environment-driven settings. Read once at import; every value has a working default
so the engine runs offline (no API key means the text-generation collaborator is
treated as unavailable and static fallbacks are used).
"""

import os
from pathlib import Path

# --- Text-generation collaborator (OpenAI-compatible endpoint) ---

LLM_API_KEY = (os.getenv("GROK_API_KEY") or os.getenv("XAI_API_KEY") or "").strip()
LLM_BASE_URL = (os.getenv("LLM_BASE_URL") or "https://api.x.ai/v1").rstrip("/")
LLM_MODEL_ID = os.getenv("LLM_MODEL_ID", "grok-3-latest")
LLM_TIMEOUT_SEC = float(os.getenv("LLM_TIMEOUT_SEC", "20"))
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.3"))
LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "1500"))

# --- Catalog store ---

DATABASE_DIR = Path(__file__).resolve().parent.parent / "data"
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATABASE_DIR / 'vetmatch.db'}")
CATALOG_SEED_ON_EMPTY = os.getenv("CATALOG_SEED_ON_EMPTY", "1") not in ("0", "false", "False", "")

# --- Search limits ---

DEFAULT_PAGE_SIZE = 30
MAX_PAGE_SIZE = 100
CANDIDATE_BUDGET = 200
UNFILTERED_SAMPLE_SIZE = 20
RECOMMENDATIONS_PER_TRACK = 3
