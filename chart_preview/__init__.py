"""
chart-preview renders a chart into the documents a dry run install would
produce, in install order, and selects them by template path.
"""

__all__ = [
    "chart",
    "manifest",
    "ordering",
    "selector",
    "output",
    "render",
    "helm",
    "values",
    "exceptions",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
