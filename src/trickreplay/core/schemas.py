"""Schema loading utility."""

import json
from functools import lru_cache
from pathlib import Path

_SCHEMA_DIR = Path(__file__).parent


@lru_cache(maxsize=None)
def load_schema(name: str) -> dict:
    """Load a packaged JSON Schema (e.g. ``"match_schema.json"``) as a dict."""
    with open(_SCHEMA_DIR / name) as f:
        return json.load(f)
