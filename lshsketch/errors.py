from __future__ import annotations

__all__ = ["InvalidParameter"]


class InvalidParameter(ValueError):
    """Raised when an engine is constructed or called with out-of-contract arguments.

    Covers non-positive or out-of-range sizes, mismatched input lengths and
    degenerate derived parameters. These are programming errors: nothing is
    retried, clamped or partially computed.
    """
