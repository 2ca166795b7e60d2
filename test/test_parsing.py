"""
Parsing tests for FWJS
Checks the tagged tuples the grammar hands to the semantics pass
"""

import pytest

from error_handling import FWJSParseError
from parsing import FWJSGrammar, create_debug_parser, pretty_print_parse_tree


class TestLiterals:

  def test_number(self, parser):
    assert parser.parse_expression("42") == ("NUMBER", 42)

  def test_booleans(self, parser):
    assert parser.parse_expression("true") == ("BOOLEAN", True)
    assert parser.parse_expression("false") == ("BOOLEAN", False)

  def test_identifier(self, parser):
    assert parser.parse_expression("counter_1") == ("IDENTIFIER", "counter_1")

  def test_keyword_prefix_is_an_identifier(self, parser):
    assert parser.parse_expression("printer") == ("IDENTIFIER", "printer")
    assert parser.parse_expression("iffy") == ("IDENTIFIER", "iffy")


class TestOperators:

  def test_multiplication_binds_tighter(self, parser):
    tree = parser.parse_expression("1 + 2 * 3")
    assert tree == ("BINARY_OP", {
      "op": "+",
      "left": ("NUMBER", 1),
      "right": ("BINARY_OP", {"op": "*", "left": ("NUMBER", 2), "right": ("NUMBER", 3)}),
    })

  def test_left_associative(self, parser):
    tree = parser.parse_expression("10 - 4 - 3")
    assert tree[1]["op"] == "-"
    assert tree[1]["left"] == ("BINARY_OP", {"op": "-", "left": ("NUMBER", 10), "right": ("NUMBER", 4)})
    assert tree[1]["right"] == ("NUMBER", 3)

  def test_comparison_below_arithmetic(self, parser):
    tree = parser.parse_expression("n <= 1 + 1")
    assert tree[1]["op"] == "<="
    assert tree[1]["left"] == ("IDENTIFIER", "n")

  def test_equality_is_not_assignment(self, parser):
    tree = parser.parse_expression("x == 1")
    assert tree == ("BINARY_OP", {"op": "==", "left": ("IDENTIFIER", "x"), "right": ("NUMBER", 1)})

  def test_parentheses_group(self, parser):
    tree = parser.parse_expression("(1 + 2) * 3")
    assert tree[1]["op"] == "*"
    assert tree[1]["left"][1]["op"] == "+"


class TestForms:

  def test_var_declaration(self, parser):
    assert parser.parse_expression("var x = 5") == (
      "VAR_DECL", {"name": "x", "value": ("NUMBER", 5)})

  def test_assignment_is_right_nested(self, parser):
    tree = parser.parse_expression("a = b = 2")
    assert tree == ("ASSIGN", {"name": "a", "value": ("ASSIGN", {"name": "b", "value": ("NUMBER", 2)})})

  def test_print(self, parser):
    assert parser.parse_expression("print(7)") == ("PRINT", ("NUMBER", 7))

  def test_function(self, parser):
    tree = parser.parse_expression("function(a, b) { a + b }")
    assert tree[0] == "FUNCTION"
    assert tree[1]["params"] == ["a", "b"]
    assert tree[1]["body"][0] == "BLOCK"
    assert len(tree[1]["body"][1]) == 1

  def test_function_without_params(self, parser):
    tree = parser.parse_expression("function() { }")
    assert tree == ("FUNCTION", {"params": [], "body": ("BLOCK", [])})

  def test_calls_chain(self, parser):
    tree = parser.parse_expression("f(1)(2, 3)")
    assert tree[0] == "CALL"
    assert tree[1]["args"] == [("NUMBER", 2), ("NUMBER", 3)]
    assert tree[1]["function"] == ("CALL", {"function": ("IDENTIFIER", "f"), "args": [("NUMBER", 1)]})

  def test_if_else(self, parser):
    tree = parser.parse_expression("if (x) { 1 } else { 2 }")
    assert tree[0] == "IF"
    assert tree[1]["cond"] == ("IDENTIFIER", "x")
    assert tree[1]["then"] == ("BLOCK", [("NUMBER", 1)])
    assert tree[1]["else"] == ("BLOCK", [("NUMBER", 2)])

  def test_if_without_else(self, parser):
    tree = parser.parse_expression("if (x) 1")
    assert tree[1]["else"] is None
    assert tree[1]["then"] == ("NUMBER", 1)

  def test_while(self, parser):
    tree = parser.parse_expression("while (i < 3) { i = i + 1 }")
    assert tree[0] == "WHILE"
    assert tree[1]["cond"][1]["op"] == "<"
    assert tree[1]["body"][1][0][0] == "ASSIGN"


class TestPrograms:

  def test_statements_and_semicolons(self, parser):
    statements = parser.parse_string("var x = 1; x = x + 1;; print(x)")
    assert [stmt[0] for stmt in statements] == ["VAR_DECL", "ASSIGN", "PRINT"]

  def test_semicolons_are_optional(self, parser):
    statements = parser.parse_string("var x = 1\nprint(x)")
    assert len(statements) == 2

  def test_comments_are_ignored(self, parser):
    source = """
      // line comment
      var x = 1; /* block
      comment */ print(x)
    """
    statements = parser.parse_string(source)
    assert [stmt[0] for stmt in statements] == ["VAR_DECL", "PRINT"]

  def test_empty_program(self, parser):
    assert parser.parse_string("") == []
    assert parser.parse_string("  // nothing\n") == []

  def test_parse_file(self, parser, tmp_path):
    script = tmp_path / "prog.fwjs"
    script.write_text("var a = 2;\nprint(a * 3);\n")
    statements = parser.parse_file(str(script))
    assert len(statements) == 2

  def test_debug_parser_matches_plain_parser(self, parser):
    source = "var f = function(n) { n }; f(3)"
    assert create_debug_parser().parse_string(source) == parser.parse_string(source)

  def test_grammar_parts_are_exposed(self):
    grammar = FWJSGrammar()
    assert grammar.parse_program("1; 2") == [("NUMBER", 1), ("NUMBER", 2)]


class TestCallLines:

  def test_parenthesized_line_starts_new_statement(self, parser):
    statements = parser.parse_string("var a = 1\n(a)")
    assert statements == [
      ("VAR_DECL", {"name": "a", "value": ("NUMBER", 1)}),
      ("IDENTIFIER", "a"),
    ]

  def test_callee_and_arguments_on_one_line(self, parser):
    assert parser.parse_expression("f (1)")[0] == "CALL"
    assert parser.parse_string("f\n(1)") == [("IDENTIFIER", "f"), ("NUMBER", 1)]

  def test_arguments_may_span_lines(self, parser):
    tree = parser.parse_expression("f(1,\n  2)")
    assert tree[1]["args"] == [("NUMBER", 1), ("NUMBER", 2)]

  def test_program_value_after_parenthesized_line(self, interp):
    assert interp.run("var a = 1\n(a)")["value"] == 1


class TestParseErrors:

  def test_deeply_nested_parentheses(self, parser):
    with pytest.raises(FWJSParseError) as exc_info:
      parser.parse_expression("(" * 500 + "1" + ")" * 500, "deep.fwjs")
    assert exc_info.value.message == "Expression nested too deeply"
    assert exc_info.value.filename == "deep.fwjs"

  def test_moderate_nesting_still_parses(self, parser):
    assert parser.parse_expression("(" * 20 + "7" + ")" * 20) == ("NUMBER", 7)

  def test_unbalanced_parenthesis(self, parser):
    with pytest.raises(FWJSParseError) as exc_info:
      parser.parse_string("print((1 + 2)")
    error = exc_info.value
    assert error.line == 1
    assert any("Parentheses" in s for s in error.suggestions)

  def test_keyword_as_name(self, parser):
    with pytest.raises(FWJSParseError):
      parser.parse_string("var while = 3")

  def test_error_message_carries_filename_and_context(self, parser):
    with pytest.raises(FWJSParseError) as exc_info:
      parser.parse_string("var x = 1;\nvar = 2;", "bad.fwjs")
    text = str(exc_info.value)
    assert text.startswith("bad.fwjs: Parse error at line")
    assert "^ Error here" in text

  def test_single_expression_rejects_trailing_input(self, parser):
    with pytest.raises(FWJSParseError):
      parser.parse_expression("1 2")

  def test_undecodable_file(self, parser, tmp_path):
    script = tmp_path / "binary.fwjs"
    script.write_bytes(b"\xff\xfe\x00")
    with pytest.raises(FWJSParseError):
      parser.parse_file(str(script))


class TestParseTreePrinting:

  def test_pretty_print_parse_tree(self, parser):
    text = pretty_print_parse_tree(parser.parse_string("var x = 1 + 2"))
    lines = text.splitlines()
    assert lines[0] == "VAR_DECL"
    assert "  name: 'x'" in lines
    assert "BINARY_OP" in text
