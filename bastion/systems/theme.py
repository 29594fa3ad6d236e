"""External map-theme generator.

Given a free-text theme, asks a hosted LLM for a terrain grid. The
collaborator is optional and unreliable by nature: every failure path
(missing key, timeout, HTTP error, malformed or mis-sized payload) returns
None and the caller falls back to procedural generation.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Protocol

import requests

from bastion.core.enums import TerrainType

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

# Codes the generator is allowed to emit; goal cells are stamped by the core.
THEME_CODES: frozenset[int] = frozenset({
    TerrainType.GRASS, TerrainType.WALL, TerrainType.SWAMP, TerrainType.TREE, TerrainType.WATER,
})

_PROMPT = """Generate a 2D grid map for a Tower Defense game based on the theme: "{theme}".
The grid size is {width}x{height}.
Return a JSON object containing a 'grid' property which is a 2D array of integers.

Integer mappings:
0 = Grass (Buildable)
1 = Wall (Obstacle)
2 = Swamp (Slows enemies)
5 = Tree (Obstacle, decorative)
6 = Water (Obstacle)

Ensure there is a clear path from the top edge to the bottom edge.
Do not block the path completely.
Add some decorative clusters of trees or water appropriate for the theme.
"""


class ThemeMapProvider(Protocol):
    def generate(self, theme: str, width: int, height: int) -> list[list[int]] | None:
        """Return *height* rows of *width* terrain codes, or None."""


class GeminiThemeProvider:
    """Theme provider backed by the Gemini ``generateContent`` REST endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gemini-2.5-flash",
        timeout: float = 10.0,
    ) -> None:
        self._api_key = api_key if api_key is not None else (
            os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY", "")
        )
        self._model = model
        self._timeout = timeout

    def generate(self, theme: str, width: int, height: int) -> list[list[int]] | None:
        if not self._api_key:
            logger.info("No theme-generator credential configured; using procedural map.")
            return None
        try:
            text = self._call(theme, width, height)
            return parse_theme_grid(text, width, height)
        except (requests.RequestException, ValueError, KeyError, TypeError, IndexError) as exc:
            logger.warning("Theme generation for %r failed: %s", theme, exc)
            return None

    def _call(self, theme: str, width: int, height: int) -> str:
        resp = requests.post(
            GEMINI_URL.format(model=self._model),
            params={"key": self._api_key},
            json={
                "contents": [{"parts": [{"text": _PROMPT.format(theme=theme, width=width, height=height)}]}],
                "generationConfig": {
                    "responseMimeType": "application/json",
                    "responseSchema": {
                        "type": "OBJECT",
                        "properties": {
                            "grid": {"type": "ARRAY", "items": {"type": "ARRAY", "items": {"type": "INTEGER"}}},
                        },
                        "required": ["grid"],
                    },
                },
            },
            timeout=self._timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        return data["candidates"][0]["content"]["parts"][0]["text"]


def parse_theme_grid(text: str, width: int, height: int) -> list[list[int]] | None:
    """Validate a generator response and return the grid rows, or None."""
    data = json.loads(text or "{}")
    rows = data.get("grid") if isinstance(data, dict) else None
    if not isinstance(rows, list) or len(rows) != height:
        logger.warning("Theme grid rejected: expected %d rows", height)
        return None
    result: list[list[int]] = []
    for row in rows:
        if not isinstance(row, list) or len(row) != width:
            logger.warning("Theme grid rejected: expected %d columns", width)
            return None
        codes = [int(c) for c in row]
        if any(c not in THEME_CODES for c in codes):
            logger.warning("Theme grid rejected: unknown terrain code")
            return None
        result.append(codes)
    return result
