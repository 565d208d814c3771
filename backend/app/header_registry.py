# app/header_registry.py
"""
Batch-scoped registry of the dynamic CSV columns discovered while parsing
rankingInfo texts.

Two independent namespaces are kept: columns derived from query-rewrite
expressions, and columns derived from term weights. The registry also holds
the batch's anchor keyword (primary term of the first term-group seen in the
run), which decides whose field contributions become columns.

Create one instance per export run; it is not safe to share between runs
that overlap.
"""
from __future__ import annotations

from typing import List, Optional, Set


class RegistryFrozenError(RuntimeError):
    """Raised when a column is recorded after the batch was frozen."""


class HeaderRegistry:
    def __init__(self) -> None:
        self._expression_columns: Set[str] = set()
        self._term_columns: Set[str] = set()
        self._anchor_keyword: Optional[str] = None
        self._frozen = False

    # -------------------------------
    # Lifecycle
    # -------------------------------
    def reset(self) -> None:
        """Clear both namespaces and the anchor keyword, and unfreeze."""
        self._expression_columns = set()
        self._term_columns = set()
        self._anchor_keyword = None
        self._frozen = False

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -------------------------------
    # Writers (idempotent)
    # -------------------------------
    def record_expression_column(self, name: str) -> None:
        self._check_writable(self._expression_columns, name)
        self._expression_columns.add(name)

    def record_term_column(self, name: str) -> None:
        self._check_writable(self._term_columns, name)
        self._term_columns.add(name)

    def claim_anchor(self, keyword: str) -> str:
        """
        Return the batch's anchor keyword, making `keyword` the anchor if
        none has been seen yet in this run.
        """
        if self._anchor_keyword is None:
            self._anchor_keyword = keyword
        return self._anchor_keyword

    @property
    def anchor_keyword(self) -> Optional[str]:
        return self._anchor_keyword

    # -------------------------------
    # Readers
    # -------------------------------
    def sorted_expression_columns(self) -> List[str]:
        return sorted(self._expression_columns)

    def sorted_term_columns(self) -> List[str]:
        return sorted(self._term_columns)

    def _check_writable(self, namespace: Set[str], name: str) -> None:
        if self._frozen and name not in namespace:
            raise RegistryFrozenError(f"registry is frozen; cannot add column {name!r}")
