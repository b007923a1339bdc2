"""Link rewriting and prefix concealment engines."""

from .concealer import build_concealment, refresh_concealment, render_displayed, safe_refresh
from .references import find_references
from .rewriter import rewrite, safe_rewrite

__all__ = [
    "build_concealment",
    "refresh_concealment",
    "render_displayed",
    "safe_refresh",
    "find_references",
    "rewrite",
    "safe_rewrite",
]
