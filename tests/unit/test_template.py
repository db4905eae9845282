"""Unit tests for TemplateEvaluator and SubstitutionBuffer."""

from __future__ import annotations

import pytest

from cdrexport.core.template import SubstitutionBuffer, TemplateEvaluator
from cdrexport.models.records import CallRecord


@pytest.fixture
def evaluator() -> TemplateEvaluator:
    return TemplateEvaluator()


@pytest.fixture
def record() -> CallRecord:
    return CallRecord(
        src="1001",
        dst="5551234567",
        channel="PJSIP/1001-00000001",
        disposition="ANSWERED",
        billsec=37,
        variables={"which": "dst", "campaign": "spring"},
    )


class TestSubstitution:
    def test_plain_text_passes_through(self, evaluator, record):
        assert evaluator.evaluate("static value", record) == "static value"

    def test_single_variable(self, evaluator, record):
        assert evaluator.evaluate("${dst}", record) == "5551234567"

    def test_mixed_text_and_variables(self, evaluator, record):
        assert evaluator.evaluate("${src}->${dst} (${billsec}s)", record) == (
            "1001->5551234567 (37s)"
        )

    def test_custom_variable(self, evaluator, record):
        assert evaluator.evaluate("${campaign}", record) == "spring"

    def test_unknown_variable_is_empty(self, evaluator, record):
        assert evaluator.evaluate("[${nope}]", record) == "[]"

    def test_cdr_function(self, evaluator, record):
        assert evaluator.evaluate("${CDR(disposition)}", record) == "ANSWERED"

    def test_cdr_function_ignores_options(self, evaluator, record):
        assert evaluator.evaluate("${CDR(billsec,f)}", record) == "37"

    def test_unknown_function_is_empty(self, evaluator, record):
        assert evaluator.evaluate("${NOSUCH(dst)}", record) == ""

    def test_nested_placeholder(self, evaluator, record):
        # ${which} -> "dst", then ${dst}
        assert evaluator.evaluate("${${which}}", record) == "5551234567"

    def test_unterminated_placeholder_kept_verbatim(self, evaluator, record):
        assert evaluator.evaluate("x${dst", record) == "x${dst"

    def test_nested_placeholder_with_suffix(self, evaluator, record):
        template = "${${which}:0:3}-${camp${CDR(nope)}aign}"
        assert evaluator.evaluate(template, record) == "555-spring"

    def test_unterminated_outer_keeps_closed_inner_verbatim(self, evaluator, record):
        assert evaluator.evaluate("a${b${dst}", record) == "a${b${dst}"

    def test_bare_braces_inside_placeholder_are_balanced(self, evaluator):
        namespace = {"a{b}c": "ok"}
        assert evaluator.substitute("${a{b}c}!", namespace) == "ok!"

    def test_nesting_beyond_interpreter_recursion_limit(self, evaluator, record):
        depth = 5000
        template = "${" * depth + "dst" + "}" * depth
        assert evaluator.evaluate(template, record) == ""
        assert evaluator.evaluate("${" * depth + "x", record) == "${" * depth + "x"

    def test_render_applies_buffer(self):
        evaluator = TemplateEvaluator(buffer_size=4)
        assert evaluator.render("${dst}", {"dst": "123456"}) == "123"

    def test_dollar_without_brace_is_literal(self, evaluator, record):
        assert evaluator.evaluate("$dst $5", record) == "$dst $5"

    def test_empty_template(self, evaluator, record):
        assert evaluator.evaluate("", record) == ""


class TestSubstring:
    @pytest.mark.parametrize(
        ("template", "expected"),
        [
            ("${dst:0:3}", "555"),
            ("${dst:3}", "1234567"),
            ("${dst:-4}", "4567"),
            ("${dst:-4:2}", "45"),
            ("${dst:0:-4}", "555123"),
            ("${dst:20}", ""),
            ("${dst:1:0}", ""),
            ("${dst:-100:3}", "555"),
            ("${CDR(dst):0:3}", "555"),
        ],
    )
    def test_offsets_and_lengths(self, evaluator, record, template, expected):
        assert evaluator.evaluate(template, record) == expected


class TestTruncation:
    def test_buffer_capacity_reserves_terminator(self):
        buf = SubstitutionBuffer(1024)
        assert buf.size == 1024
        assert buf.capacity == 1023

    def test_fit_truncates_silently(self):
        assert SubstitutionBuffer(4).fit("abcdef") == "abc"
        assert SubstitutionBuffer(4).fit("ab") == "ab"

    def test_rejects_degenerate_size(self):
        with pytest.raises(ValueError):
            SubstitutionBuffer(1)

    def test_long_output_is_cut_to_bound_minus_one(self, record):
        evaluator = TemplateEvaluator(buffer_size=16)
        long_record = record.model_copy(update={"userfield": "x" * 100})
        value = evaluator.evaluate("${userfield}", long_record)
        assert value == "x" * 15

    def test_default_bound(self, evaluator, record):
        long_record = record.model_copy(update={"userfield": "y" * 5000})
        assert len(evaluator.evaluate("${userfield}", long_record)) == 1023

    def test_truncation_logs_nothing(self, record, caplog):
        evaluator = TemplateEvaluator(buffer_size=8)
        with caplog.at_level("DEBUG"):
            evaluator.evaluate("${dst}${dst}", record)
        assert caplog.records == []
