"""Intent and entity resolution for chat turns.

This module provides:
- Rule-based intent classification over a closed intent set
- Heuristic project/component detection
- History fallback for implicit references
- Grounded context assembly for the generator
"""

from playground.context.models import DetectedEntities, IntentTag

__all__ = [
    "DetectedEntities",
    "IntentTag",
]
