# app/ranking_info.py
"""
Parser for the rankingInfo debug text attached to each search result when the
query is sent with debugRankingInformation=true.

The text is a loose, multi-section report, for example:

    Document weights:
    Title: 0; Quality: 180; Date: 405; Adjacency: 0; Source: 500; Custom: 350; QRE: 1000; Ranking functions: 0;

    Total weight: 2435

    Terms weights:
    printer: 100, 4; printers: 50, 1;
    Title: 800; Concept: 0; Summary: 300; URI: 0; Formatted: 0; Casing: 0; Relation: 0; Frequency: 1018;

    Total weight: 2118

    QRE:
    Expression: "@source==\"Manuals\"" Score: 1000

Public API:
    parse_ranking_info(text, registry) -> DiagnosticRecord

The parser is total: missing sections and malformed lines just produce
nothing for that piece. Dynamic column names are written into the run's
HeaderRegistry as a side effect.
"""
from __future__ import annotations

import re
from typing import Any, Dict, Optional, Tuple

from app.header_registry import HeaderRegistry
from app.models import DiagnosticRecord

# -------------------------------
# Extraction rules
# -------------------------------
# (record field, label in the text, regex flags)
SCALAR_LABELS: Tuple[Tuple[str, str, int], ...] = (
    ("title_weight", "Title", 0),
    ("quality", "Quality", 0),
    ("date", "Date", 0),
    ("adjacency", "Adjacency", 0),
    ("source", "Source", 0),
    ("custom", "Custom", 0),
    ("qre", "QRE", 0),
    ("ranking_functions", "Ranking functions", re.IGNORECASE),
)

_SCALAR_PATTERNS = {
    field: re.compile(rf"\b{re.escape(label)}:\s*(-?\d+)", flags)
    for field, label, flags in SCALAR_LABELS
}

# "QRE: 1000;" is a scalar weight, a bare "QRE:" opens the expressions section
_QRE_SECTION_START = re.compile(r"\bQRE:(?!\s*-?\d)")
_SECTION_HEADER = re.compile(
    r"^[ \t]*(?:Document weights:|Terms weights:|Total weight"
    r"|Ranking Functions:(?!\s*-?\d)|QRE:(?!\s*-?\d))",
    re.MULTILINE,
)
_EXPRESSION = re.compile(r'Expression:\s*"(?P<expr>.*?)"\s*Score:\s*(?P<score>-?\d+)')

TERMS_START = "Terms weights:"
TERMS_END = "Total weight"
# "<name>: <int>;" is a field contribution, "<name>: <int>, <int>;" a term count pair
_TERM_ENTRY = re.compile(
    r"(?P<name>[^:;\n]+?)[ \t]*:[ \t]*(?P<n1>-?\d+)(?:[ \t]*,[ \t]*(?P<n2>-?\d+))?[ \t]*;"
)

QRE_COLUMN_PREFIX = "RI_QRE_Expression_"
QRE_LABEL_MAX = 50
TERM_COLUMN_PREFIX = "Term_"


# -------------------------------
# Column naming
# -------------------------------
def expression_column(expression: str, ordinal: int) -> str:
    """
    Column name for a query-rewrite expression. `ordinal` is the 1-based
    position of the expression within its record and is only used when the
    sanitized expression is empty.
    """
    label = expression.replace("@", "").replace('"', "").replace("=", "_")
    label = label[:QRE_LABEL_MAX].strip()
    if not label:
        label = f"Unnamed_QRE_{ordinal}"
    return f"{QRE_COLUMN_PREFIX}{label}"


def term_count_columns(keyword: str) -> Tuple[str, str]:
    return f"{TERM_COLUMN_PREFIX}{keyword}_N1", f"{TERM_COLUMN_PREFIX}{keyword}_N2"


def term_field_column(anchor_keyword: str, field_name: str) -> str:
    return f"{TERM_COLUMN_PREFIX}{anchor_keyword}_{field_name}"


# -------------------------------
# Section scanning
# -------------------------------
def _qre_section(text: str) -> str:
    start = _QRE_SECTION_START.search(text)
    if not start:
        return ""
    end = _SECTION_HEADER.search(text, start.end())
    return text[start.end():end.start() if end else len(text)]


def _terms_section(text: str) -> str:
    start = text.find(TERMS_START)
    if start < 0:
        return ""
    start += len(TERMS_START)
    end = text.find(TERMS_END, start)
    return text[start:end if end >= 0 else len(text)]


def _scalars(text: str) -> Dict[str, int]:
    values: Dict[str, int] = {}
    for field, pattern in _SCALAR_PATTERNS.items():
        m = pattern.search(text)
        values[field] = int(m.group(1)) if m else 0
    return values


def _expressions(text: str, registry: HeaderRegistry) -> Dict[str, int]:
    scores: Dict[str, int] = {}
    section = _qre_section(text)
    for ordinal, m in enumerate(_EXPRESSION.finditer(section), start=1):
        column = expression_column(m.group("expr"), ordinal)
        registry.record_expression_column(column)
        scores[column] = int(m.group("score"))
    return scores


def _terms(text: str, registry: HeaderRegistry) -> Tuple[Dict[str, int], int]:
    """
    Walk the term-groups of the "Terms weights" section.

    A count pair opens a new group when it is the first entry on its line or
    follows a field entry; further pairs on the same line are lexical variants
    of that group's primary term. Every field value is summed, but only the
    anchor keyword's group exposes its fields as columns.
    """
    scores: Dict[str, int] = {}
    contributions = 0
    group_keyword: Optional[str] = None
    anchor: Optional[str] = None

    for line in _terms_section(text).splitlines():
        previous_was_pair = False
        for m in _TERM_ENTRY.finditer(line):
            name = m.group("name").strip()
            if not name:
                continue
            value = int(m.group("n1"))

            if m.group("n2") is not None:
                if not previous_was_pair:
                    group_keyword = name
                    anchor = registry.claim_anchor(name)
                n1_col, n2_col = term_count_columns(name)
                registry.record_term_column(n1_col)
                registry.record_term_column(n2_col)
                scores[n1_col] = value
                scores[n2_col] = int(m.group("n2"))
                previous_was_pair = True
                continue

            previous_was_pair = False
            if group_keyword is None:
                # field lines before any term belong to no group
                continue
            contributions += value
            if group_keyword == anchor:
                column = term_field_column(anchor, name)
                registry.record_term_column(column)
                scores[column] = value

    return scores, contributions


# -------------------------------
# Public entry point
# -------------------------------
def parse_ranking_info(text: Any, registry: HeaderRegistry) -> DiagnosticRecord:
    """
    Turn one rankingInfo string into a DiagnosticRecord.
    None, empty or non-string input yields an all-zero record.
    """
    if not isinstance(text, str) or not text:
        return DiagnosticRecord()

    scalars = _scalars(text)
    expression_scores = _expressions(text, registry)
    term_scores, term_contributions = _terms(text, registry)

    return DiagnosticRecord(
        **scalars,
        expression_scores=expression_scores,
        term_scores=term_scores,
        term_contributions=term_contributions,
    )
