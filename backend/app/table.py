# app/table.py
"""
Assemble parsed results into one rectangular CSV table.

Header = fixed columns ++ sorted expression columns ++ sorted term columns.
Every row has exactly len(header) cells; a record without a given dynamic
column gets an empty cell for it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Sequence, Tuple

from app.header_registry import HeaderRegistry
from app.models import DiagnosticRecord, SearchResult
from app.text_utils import header_cell, plain_cell, text_cell

Pair = Tuple[SearchResult, DiagnosticRecord]

# (header, cell builder)
FIXED_COLUMNS: Sequence[Tuple[str, Callable[[SearchResult, DiagnosticRecord], str]]] = (
    ("Title", lambda r, ri: text_cell(r.title)),
    ("URI", lambda r, ri: text_cell(r.uri)),
    ("Score", lambda r, ri: plain_cell(r.score)),
    ("RI_DocScore", lambda r, ri: plain_cell(ri.doc_score)),
    ("RI_TermContributions", lambda r, ri: plain_cell(ri.term_contributions)),
    ("RI_TotalScore", lambda r, ri: plain_cell(ri.total_score)),
    ("Percent Score", lambda r, ri: plain_cell(r.percent_score)),
    ("Ranking Modifier", lambda r, ri: text_cell(r.ranking_modifier)),
    ("Is Recommendation", lambda r, ri: plain_cell(r.is_recommendation)),
    ("RI_Title", lambda r, ri: plain_cell(ri.title_weight)),
    ("RI_Quality", lambda r, ri: plain_cell(ri.quality)),
    ("RI_Date", lambda r, ri: plain_cell(ri.date)),
    ("RI_Adjacency", lambda r, ri: plain_cell(ri.adjacency)),
    ("RI_Source", lambda r, ri: plain_cell(ri.source)),
    ("RI_Custom", lambda r, ri: plain_cell(ri.custom)),
    ("RI_QRE", lambda r, ri: plain_cell(ri.qre)),
    ("RI_RankingFunctions", lambda r, ri: plain_cell(ri.ranking_functions)),
)

FIXED_HEADER: List[str] = [name for name, _ in FIXED_COLUMNS]


@dataclass
class Table:
    header: List[str]
    rows: List[List[str]] = field(default_factory=list)

    def to_csv(self) -> str:
        """Header line + one line per row, comma-separated, LF-joined."""
        # Cells arrive pre-escaped: text always quoted, numbers bare, empty for missing.
        # csv.writer cannot mix those quoting rules per cell, so rows are joined here.
        lines = [",".join(header_cell(h) for h in self.header)]
        lines.extend(",".join(row) for row in self.rows)
        return "\n".join(lines)


def assemble_table(pairs: Iterable[Pair], registry: HeaderRegistry) -> Table:
    expression_columns = registry.sorted_expression_columns()
    term_columns = registry.sorted_term_columns()
    table = Table(header=FIXED_HEADER + expression_columns + term_columns)

    for result, record in pairs:
        row = [build(result, record) for _, build in FIXED_COLUMNS]
        row.extend(plain_cell(record.expression_scores.get(c)) for c in expression_columns)
        row.extend(plain_cell(record.term_scores.get(c)) for c in term_columns)
        table.rows.append(row)

    return table
