"""Reconcile optimizer exports into classified DFS lineup portfolios."""

__version__ = "0.3.0"
