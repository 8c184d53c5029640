from __future__ import annotations


class EngineError(RuntimeError):
    """Caller bug against table state. Never a player-facing event."""


class DeckExhaustedError(EngineError):
    pass
