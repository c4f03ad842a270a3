"""Presentation-facing side of resolution.

The aiohttp server lives in ``modserve.frontend.server`` and is imported
lazily so the decision layer has no web dependency.
"""

from .decision import (
    Directive,
    ErrorPage,
    FetchPrompt,
    PassThrough,
    TemporaryRedirect,
    decide,
    decide_error,
)

__all__ = [
    "Directive",
    "ErrorPage",
    "FetchPrompt",
    "PassThrough",
    "TemporaryRedirect",
    "decide",
    "decide_error",
]
