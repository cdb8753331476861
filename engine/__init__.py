"""Core engine package for Card Rooms."""

__all__ = [
    "cards",
    "deck",
    "errors",
    "scoring",
    "effects",
    "rules_schema",
    "state",
    "registry",
    "game",
    "service",
]
