import pytest

from app.header_registry import HeaderRegistry
from app.ranking_info import expression_column, parse_ranking_info


@pytest.fixture
def registry():
    return HeaderRegistry()


@pytest.mark.parametrize("text", [None, "", "no markers in here at all", 12345, "Terms weights:\n", "QRE:\n"])
def test_missing_markers_give_empty_record(registry, text):
    ri = parse_ranking_info(text, registry)
    assert ri.doc_score == 0
    assert ri.term_contributions == 0
    assert ri.total_score == 0
    assert ri.expression_scores == {}
    assert ri.term_scores == {}
    assert registry.sorted_expression_columns() == []
    assert registry.sorted_term_columns() == []


def test_scalar_weights_only(registry):
    ri = parse_ranking_info("Title: 50; Quality: 20;", registry)
    assert ri.title_weight == 50
    assert ri.quality == 20
    assert ri.doc_score == 70
    assert ri.term_contributions == 0
    assert ri.total_score == 70
    assert registry.sorted_expression_columns() == []
    assert registry.sorted_term_columns() == []


def test_all_eight_scalars_and_negative_values(registry):
    text = (
        "Title: 1; Quality: 2; Date: -3; Adjacency: 4; Source: 5; "
        "Custom: 6; QRE: 7; Ranking functions: 8;"
    )
    ri = parse_ranking_info(text, registry)
    assert (ri.title_weight, ri.quality, ri.date, ri.adjacency) == (1, 2, -3, 4)
    assert (ri.source, ri.custom, ri.qre, ri.ranking_functions) == (5, 6, 7, 8)
    assert ri.doc_score == 30


def test_first_occurrence_wins(registry):
    ri = parse_ranking_info("Quality: 10;\nQuality: 99;", registry)
    assert ri.quality == 10


def test_full_sample(registry, sample_ranking_info):
    ri = parse_ranking_info(sample_ranking_info, registry)

    assert ri.doc_score == 2435
    # printer group: 800 + 300 + 1018; ink group: 120 + 60
    assert ri.term_contributions == 2298
    assert ri.total_score == 2435 + 2298

    assert ri.expression_scores == {
        "RI_QRE_Expression_source__Manuals": 1000,
        "RI_QRE_Expression_filetype_pdf": 250,
    }
    assert ri.term_scores["Term_printer_N1"] == 100
    assert ri.term_scores["Term_printer_N2"] == 4
    assert ri.term_scores["Term_printers_N1"] == 50
    assert ri.term_scores["Term_printers_N2"] == 1
    assert ri.term_scores["Term_ink_N1"] == 80
    assert ri.term_scores["Term_ink_N2"] == 2
    assert ri.term_scores["Term_printer_Frequency"] == 1018
    assert ri.term_scores["Term_printer_Summary"] == 300
    assert "Term_ink_Summary" not in ri.term_scores

    assert registry.anchor_keyword == "printer"
    assert registry.sorted_expression_columns() == [
        "RI_QRE_Expression_filetype_pdf",
        "RI_QRE_Expression_source__Manuals",
    ]


def test_qre_expression_column_naming(registry):
    ri = parse_ranking_info('QRE:\nExpression: "@foo=bar" Score: 5\n', registry)
    assert ri.expression_scores == {"RI_QRE_Expression_foo_bar": 5}
    assert registry.sorted_expression_columns() == ["RI_QRE_Expression_foo_bar"]
    # the QRE section header is not a scalar weight
    assert ri.qre == 0


def test_qre_scalar_and_section_are_told_apart(registry):
    text = 'QRE: 40; Title: 1;\n\nQRE:\nExpression: "@a=1" Score: 40\n'
    ri = parse_ranking_info(text, registry)
    assert ri.qre == 40
    assert ri.expression_scores == {"RI_QRE_Expression_a_1": 40}


def test_qre_section_stops_at_next_section(registry):
    text = (
        'QRE:\nExpression: "@a=1" Score: 3\n\n'
        'Ranking Functions:\nExpression: "@b=2" Score: 9\n'
    )
    ri = parse_ranking_info(text, registry)
    assert list(ri.expression_scores) == ["RI_QRE_Expression_a_1"]


def test_unnamed_expression_uses_ordinal(registry):
    text = 'QRE:\nExpression: "@x" Score: 1\nExpression: "@@" Score: 2\n'
    ri = parse_ranking_info(text, registry)
    assert ri.expression_scores == {
        "RI_QRE_Expression_x": 1,
        "RI_QRE_Expression_Unnamed_QRE_2": 2,
    }


def test_expression_label_truncated_then_trimmed():
    expr = "@" + "a" * 49 + " tail"
    assert expression_column(expr, 1) == "RI_QRE_Expression_" + "a" * 49
    assert expression_column("   ", 3) == "RI_QRE_Expression_Unnamed_QRE_3"


def test_only_anchor_group_fields_become_columns(registry):
    text = "Terms weights:\nalpha: 10, 2; Title: 30;\nbeta: 4, 1; Date: 9;\n"
    ri = parse_ranking_info(text, registry)
    assert ri.term_contributions == 39
    assert ri.term_scores["Term_alpha_Title"] == 30
    assert "Term_beta_Date" not in ri.term_scores
    assert "Term_beta_Date" not in registry.sorted_term_columns()
    # count pairs are recorded for every group
    assert registry.sorted_term_columns() == [
        "Term_alpha_N1",
        "Term_alpha_N2",
        "Term_alpha_Title",
        "Term_beta_N1",
        "Term_beta_N2",
    ]
    assert ri.total_score == ri.doc_score + ri.term_contributions


def test_groups_on_one_line(registry):
    text = "Terms weights:\nalpha: 10, 2; Title: 30; beta: 4, 1; Date: 9;"
    ri = parse_ranking_info(text, registry)
    assert ri.term_contributions == 39
    assert "Term_alpha_Title" in ri.term_scores
    assert "Term_alpha_Date" not in ri.term_scores


def test_anchor_is_kept_across_the_batch(registry):
    parse_ranking_info("Terms weights:\nalpha: 1, 1;\nTitle: 5;\n", registry)
    ri = parse_ranking_info("Terms weights:\nbeta: 2, 2;\nTitle: 7;\nalpha: 3, 3;\nSummary: 4;\n", registry)

    assert registry.anchor_keyword == "alpha"
    assert ri.term_contributions == 11
    assert ri.term_scores == {
        "Term_beta_N1": 2,
        "Term_beta_N2": 2,
        "Term_alpha_N1": 3,
        "Term_alpha_N2": 3,
        "Term_alpha_Summary": 4,
    }


def test_terms_section_ends_at_total_weight(registry):
    text = "Terms weights:\nalpha: 1, 1;\nTitle: 5;\n\nTotal weight: 5\nFrequency: 100;\n"
    ri = parse_ranking_info(text, registry)
    assert ri.term_contributions == 5
    assert "Term_alpha_Frequency" not in ri.term_scores


def test_malformed_lines_are_skipped(registry):
    text = "Terms weights:\ngarbage without colon\nalpha: x, y;\nalpha: 1, 2;\nTitle: abc; Summary: 3;\n"
    ri = parse_ranking_info(text, registry)
    assert ri.term_contributions == 3
    assert ri.term_scores == {"Term_alpha_N1": 1, "Term_alpha_N2": 2, "Term_alpha_Summary": 3}


def test_fields_before_any_term_are_ignored(registry):
    ri = parse_ranking_info("Terms weights:\nSummary: 3;\n", registry)
    assert ri.term_contributions == 0
    assert ri.term_scores == {}


def test_record_is_frozen(registry):
    ri = parse_ranking_info("Title: 1;", registry)
    with pytest.raises(Exception):
        ri.title_weight = 5


def test_scalar_value_on_next_line(registry):
    ri = parse_ranking_info("Title:\n50;\nQuality:\t\n 7;", registry)
    assert ri.title_weight == 50
    assert ri.quality == 7
    assert ri.doc_score == 57


def test_non_string_ranking_info_is_empty(registry):
    ri = parse_ranking_info({"x": 1}, registry)
    assert ri.total_score == 0
    assert ri.term_scores == {}
