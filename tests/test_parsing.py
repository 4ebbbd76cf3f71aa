"""Tests for lucy.parsing: line classifiers and extractors."""

import pytest

from lucy.parsing import (
    ExtensionDef,
    extract_annotation_name,
    extract_extension,
    extract_function_name,
    is_annotation,
    is_extension_def,
    is_function_definition,
    is_function_end,
    split_args,
)

# ---------------------------------------------------------------------------
# Classifiers
# ---------------------------------------------------------------------------


class TestClassifiers:
    def test_annotation_comment(self) -> None:
        assert is_annotation("// @Test")
        assert is_annotation('// @Test("desc")')

    def test_annotation_requires_prefix_at_line_start(self) -> None:
        assert not is_annotation("  // @Test")
        assert not is_annotation("//@Test")
        assert not is_annotation("int x; // @Test")

    def test_extension_def(self) -> None:
        assert is_extension_def("// #annotation @Test(d) : @When(T)")
        assert not is_extension_def("// #annotations @Test(d)")
        assert not is_extension_def("// @Test")

    def test_extension_is_not_annotation(self) -> None:
        assert not is_annotation("// #annotation @Test(d)")

    def test_function_definition(self) -> None:
        assert is_function_definition("void f() {")
        assert is_function_definition("int add(int a, int b) { return a + b; }")

    def test_function_definition_needs_all_three(self) -> None:
        assert not is_function_definition("void f();")
        assert not is_function_definition("void f()")
        assert not is_function_definition("{")

    def test_function_end(self) -> None:
        assert is_function_end("}")
        assert is_function_end("    return 0; }")
        assert not is_function_end("    return 0;")


# ---------------------------------------------------------------------------
# extract_annotation_name()
# ---------------------------------------------------------------------------


class TestExtractAnnotationName:
    def test_bare_name(self) -> None:
        assert extract_annotation_name("// @When") == ("When", "")

    def test_name_with_args_verbatim(self) -> None:
        assert extract_annotation_name('// @Test(TARGET_TEST, "desc")') == (
            "Test",
            'TARGET_TEST, "desc"',
        )

    def test_two_args_not_split(self) -> None:
        assert extract_annotation_name("// @Name(A, B)") == ("Name", "A, B")

    def test_unterminated_args_run_to_end_of_line(self) -> None:
        assert extract_annotation_name("// @Test(TARGET_TEST") == ("Test", "TARGET_TEST")
        assert extract_annotation_name("// @Name(A") == ("Name", "A")

    def test_trailing_whitespace_ignored(self) -> None:
        assert extract_annotation_name("// @When   \t") == ("When", "")

    def test_empty_parens(self) -> None:
        assert extract_annotation_name("// @Setup()") == ("Setup", "")

    def test_nested_parens_matched(self) -> None:
        assert extract_annotation_name("// @When(defined(X))") == ("When", "defined(X)")

    def test_paren_inside_string_ignored(self) -> None:
        assert extract_annotation_name('// @Test("a (b")') == ("Test", '"a (b"')

    def test_text_after_closing_paren_dropped(self) -> None:
        assert extract_annotation_name("// @Test(x) trailing") == ("Test", "x")

    def test_no_at_sign(self) -> None:
        assert extract_annotation_name("// nothing here") == ("", "")

    def test_paren_after_other_words_is_not_an_argument(self) -> None:
        assert extract_annotation_name("// @Test see (notes)") == ("Test", "")


# ---------------------------------------------------------------------------
# extract_extension()
# ---------------------------------------------------------------------------


class TestExtractExtension:
    def test_full_definition(self) -> None:
        ext = extract_extension("// #annotation @Custom(flag) : @When(cond)")
        assert ext == ExtensionDef(name="Custom", args="flag", base="When", base_arg="cond")

    def test_multiple_args(self) -> None:
        ext = extract_extension("// #annotation @Test(condition, desc) : @When(cond)")
        assert ext.name == "Test"
        assert ext.args == "condition, desc"
        assert ext.base == "When"
        assert ext.base_arg == "cond"

    def test_no_base(self) -> None:
        ext = extract_extension("// #annotation @Custom(flag)")
        assert ext.name == "Custom"
        assert ext.args == "flag"
        assert ext.base == ""
        assert ext.base_arg == ""

    def test_no_at_sign(self) -> None:
        assert extract_extension("// #annotation Custom(flag)") == ExtensionDef()

    def test_name_without_parens(self) -> None:
        ext = extract_extension("// #annotation @Plain")
        assert ext.name == "Plain"
        assert ext.args == ""
        assert ext.base == ""

    def test_colon_without_spaces_is_not_a_base(self) -> None:
        ext = extract_extension("// #annotation @Custom(flag):@When(cond)")
        assert ext.name == "Custom"
        assert ext.base == ""

    def test_unterminated_base_arg(self) -> None:
        ext = extract_extension("// #annotation @Custom(flag) : @When(cond")
        assert ext.base == "When"
        assert ext.base_arg == "cond"

    def test_disable_vocabulary(self) -> None:
        ext = extract_extension("// #annotation @Disable(reason) : @When(__LUCY_TEST_DISABLE__)")
        assert ext.name == "Disable"
        assert ext.base_arg == "__LUCY_TEST_DISABLE__"


# ---------------------------------------------------------------------------
# extract_function_name()
# ---------------------------------------------------------------------------


class TestExtractFunctionName:
    def test_simple(self) -> None:
        assert extract_function_name("void test_func() {}") == "test_func"

    def test_with_params(self) -> None:
        assert extract_function_name("int add(int a, int b) {") == "add"

    def test_no_space_before_paren(self) -> None:
        assert extract_function_name("main() {") == "main"

    def test_space_before_paren_stripped(self) -> None:
        assert extract_function_name("void f () {") == "f"


# ---------------------------------------------------------------------------
# split_args()
# ---------------------------------------------------------------------------


class TestSplitArgs:
    def test_simple(self) -> None:
        assert split_args("A, B") == ["A", "B"]

    def test_quotes_stripped(self) -> None:
        assert split_args('TARGET_TEST, "desc"') == ["TARGET_TEST", "desc"]

    def test_empty(self) -> None:
        assert split_args("") == []
        assert split_args("   ") == []

    def test_comma_inside_string_kept(self) -> None:
        assert split_args('"hello, world", X') == ["hello, world", "X"]

    def test_empty_tokens_dropped(self) -> None:
        assert split_args("a,,b") == ["a", "b"]

    def test_lone_quote_not_stripped(self) -> None:
        assert split_args('"') == ['"']

    def test_truncated_at_eight(self) -> None:
        args = split_args(", ".join(str(i) for i in range(12)))
        assert args == [str(i) for i in range(8)]

    @pytest.mark.parametrize("limit", [0, 1, 3])
    def test_custom_limit(self, limit: int) -> None:
        assert len(split_args("a, b, c, d", max_args=limit)) == limit

    def test_tabs_trimmed(self) -> None:
        assert split_args("\ta\t,\tb ") == ["a", "b"]
