"""
Tests for the ECL expression builder.
"""

import pytest

from terminology_search.config.defaults import DEFAULT_ECL_OPERATOR, ECL_OPERATORS
from terminology_search.errors import InvalidFilterRowError, UnknownEclOperatorError
from terminology_search.models.ecl import FilterRowInput
from terminology_search.services.ecl import (
    EclExpressionBuilder,
    default_row,
    make_row,
    operator_catalogue,
    render_rows,
)


class TestMakeRow:
    """Tests for make_row."""

    def test_operator_forms(self):
        row = make_row("childOf", "55342001", "Neoplastic disease")
        assert row.operator_short == "<!"
        assert row.operator_long == "childOf"

    def test_default_operator(self):
        assert make_row().operator_long == DEFAULT_ECL_OPERATOR
        assert default_row().code == ""

    def test_unknown_operator(self):
        with pytest.raises(UnknownEclOperatorError):
            make_row("siblingOf", "123")

    def test_code_and_label_trimmed(self):
        row = make_row("self", " 55342001 ", " Neoplastic disease ")
        assert row.code == "55342001"
        assert row.label == "Neoplastic disease"


class TestRenderRows:
    """Tests for render_rows."""

    def test_row_with_label(self):
        expression = render_rows([make_row("childOf", "55342001", "Neoplastic disease")])
        assert expression.short_form == "<! 55342001|Neoplastic disease|"
        assert expression.long_form == "childOf 55342001|Neoplastic disease|"

    def test_row_without_label(self):
        expression = render_rows([make_row("descendantOrSelfOf", "404684003")])
        assert expression.short_form == "<< 404684003"

    def test_any_row(self):
        """ANY rows render the bare operator, ignoring code and label."""
        expression = render_rows([make_row("ANY", "123", "ignored")])
        assert expression.short_form == "*"
        assert expression.long_form == "ANY"

    def test_self_row(self):
        expression = render_rows([make_row("self", "55342001")])
        assert expression.short_form == "55342001"
        assert expression.long_form == "self 55342001"

    def test_rows_without_code_skipped(self):
        expression = render_rows([
            make_row("childOf", "55342001"),
            make_row("descendantOf"),
            make_row("memberOf", "733073007"),
        ])
        assert expression.short_form == "<! 55342001, ^ 733073007"
        assert expression.long_form == "childOf 55342001, memberOf 733073007"

    def test_empty(self):
        expression = render_rows([default_row()])
        assert expression.short_form == ""
        assert expression.long_form == ""


class TestEclExpressionBuilder:
    """Tests for EclExpressionBuilder."""

    def test_starts_with_default_row(self):
        builder = EclExpressionBuilder()
        assert len(builder) == 1
        assert builder.rows[0] == default_row()

    def test_append_row(self):
        builder = EclExpressionBuilder()
        builder.update_row(0, code="404684003")
        builder.append_row("ancestorOf", "55342001")

        assert builder.render().short_form == "<< 404684003, > 55342001"

    def test_update_row_keeps_unset_fields(self):
        builder = EclExpressionBuilder()
        builder.update_row(0, operator="childOf", code="55342001", label="Neoplastic disease")
        builder.update_row(0, operator="parentOf")

        row = builder.rows[0]
        assert row.operator_short == ">!"
        assert row.code == "55342001"
        assert row.label == "Neoplastic disease"

    def test_update_row_unknown_operator(self):
        builder = EclExpressionBuilder()
        with pytest.raises(UnknownEclOperatorError):
            builder.update_row(0, operator="bogus")
        assert builder.rows[0] == default_row()

    def test_remove_appended_row(self):
        builder = EclExpressionBuilder()
        builder.append_row("childOf", "1")
        builder.append_row("childOf", "2")

        builder.remove_row(1)

        assert [row.code for row in builder.rows] == ["", "2"]

    def test_remove_only_row_resets_to_default(self):
        """Removing the only row leaves exactly one default row."""
        builder = EclExpressionBuilder()
        builder.update_row(0, operator="childOf", code="55342001")

        builder.remove_row(0)

        assert builder.rows == (default_row(),)

    def test_first_row_not_removable_with_others(self):
        builder = EclExpressionBuilder()
        builder.append_row("childOf", "1")

        with pytest.raises(InvalidFilterRowError):
            builder.remove_row(0)
        assert len(builder) == 2

    def test_remove_out_of_range(self):
        with pytest.raises(IndexError):
            EclExpressionBuilder().remove_row(3)

    def test_replace_all(self):
        builder = EclExpressionBuilder()
        builder.append_row("childOf", "1")
        builder.append_row("childOf", "2")

        builder.replace_all([
            FilterRowInput(operator="memberOf", code="733073007"),
            FilterRowInput(operator="ANY"),
        ])

        assert len(builder) == 2
        assert builder.render().short_form == "^ 733073007, *"

    def test_replace_all_empty(self):
        builder = EclExpressionBuilder()
        builder.append_row("childOf", "1")

        builder.replace_all([])

        assert builder.rows == (default_row(),)

    def test_replace_all_unknown_operator_keeps_rows(self):
        builder = EclExpressionBuilder()
        builder.append_row("childOf", "1")

        with pytest.raises(UnknownEclOperatorError):
            builder.replace_all([FilterRowInput(operator="nope", code="1")])
        assert len(builder) == 2

    def test_children_of(self):
        builder = EclExpressionBuilder()
        builder.append_row("memberOf", "733073007")

        builder.children_of("55342001", "Neoplastic disease")

        assert len(builder) == 1
        assert builder.render().short_form == "<! 55342001|Neoplastic disease|"

    def test_parents_of(self):
        builder = EclExpressionBuilder()
        builder.parents_of("55342001")
        assert builder.render().short_form == ">! 55342001"


def test_operator_catalogue():
    catalogue = operator_catalogue()
    assert len(catalogue) == len(ECL_OPERATORS)
    assert {"long_name": "childOf", "short": "<!"}.items() <= catalogue[3].items()
    assert catalogue[-1]["short"] == "*"
