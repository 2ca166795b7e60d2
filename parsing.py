"""
FWJS Programming Language Parser
pyparsing grammar producing tagged tuples for the semantics pass
"""

import logging
from typing import Any, List, Tuple

from pyparsing import (
    Forward, Keyword, Regex, Suppress, Optional as PyParsingOptional,
    ZeroOrMore, Group, MatchFirst, DelimitedList, ParseBaseException,
    ParserElement, StringEnd, OpAssoc, infix_notation, one_of,
    cpp_style_comment
)

from error_handling import FWJSErrorHandler, FWJSParseError

# Enable packrat parsing for performance
ParserElement.enable_packrat()

logger = logging.getLogger(__name__)


KEYWORDS = ("var", "function", "if", "else", "while", "print", "true", "false")


def make_binary(tokens) -> Tuple:
    """Fold one precedence level (a op b op c ...) left-associatively"""
    items = tokens[0]
    result = items[0]
    for i in range(1, len(items), 2):
        result = ("BINARY_OP", {"op": items[i], "left": result, "right": items[i + 1]})
    return result


def make_call(tokens) -> Tuple:
    """f(a)(b) applies the result of f(a) to b"""
    result = tokens[0]
    for args in tokens[1:]:
        result = ("CALL", {"function": result, "args": list(args)})
    return result


def make_if(tokens) -> Tuple:
    # tokens: 'if' cond then ['else' els]
    els = tokens[4] if len(tokens) > 3 else None
    return ("IF", {"cond": tokens[1], "then": tokens[2], "else": els})


class FWJSGrammar:
    """FWJS grammar definition using pyparsing"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._setup_grammar()

    def _setup_grammar(self):
        """Setup the FWJS grammar"""

        # Forward declarations for recursive structures
        expression = Forward()
        statement = Forward()

        LPAR, RPAR, LBRACE, RBRACE, SEMI = map(Suppress, "(){};")
        assign_op = Suppress(Regex(r"=(?!=)"))

        # Keywords
        var_kw = Keyword("var")
        function_kw = Keyword("function")
        if_kw = Keyword("if")
        else_kw = Keyword("else")
        while_kw = Keyword("while")
        print_kw = Keyword("print")
        reserved = MatchFirst([Keyword(kw) for kw in KEYWORDS])

        # Identifiers exclude keywords
        identifier = ~reserved + Regex(r"[A-Za-z_$][A-Za-z0-9_$]*")

        # Literals
        number = Regex(r"\d+").set_parse_action(lambda t: ("NUMBER", int(t[0])))
        boolean = (Keyword("true") | Keyword("false")).set_parse_action(
            lambda t: ("BOOLEAN", t[0] == "true"))

        # Blocks are statement lists; an if/while body may also be a bare expression
        block = (
            LBRACE + Group(ZeroOrMore(statement)) + RBRACE
        ).set_parse_action(lambda t: ("BLOCK", list(t[0])))
        body = block | expression

        function_expr = (
            function_kw + LPAR + Group(PyParsingOptional(DelimitedList(identifier))) + RPAR + block
        ).set_parse_action(lambda t: ("FUNCTION", {"params": list(t[1]), "body": t[2]}))

        if_expr = (
            if_kw + LPAR + expression + RPAR + body + PyParsingOptional(else_kw + body)
        ).set_parse_action(make_if)

        while_expr = (
            while_kw + LPAR + expression + RPAR + body
        ).set_parse_action(lambda t: ("WHILE", {"cond": t[1], "body": t[2]}))

        print_expr = (
            print_kw + LPAR + expression + RPAR
        ).set_parse_action(lambda t: ("PRINT", t[1]))

        var_decl = (
            var_kw + identifier + assign_op + expression
        ).set_parse_action(lambda t: ("VAR_DECL", {"name": t[1], "value": t[2]}))

        assignment = (
            identifier + assign_op + expression
        ).set_parse_action(lambda t: ("ASSIGN", {"name": t[0], "value": t[1]}))

        variable = identifier.copy().set_parse_action(lambda t: ("IDENTIFIER", t[0]))

        parenthesized = LPAR + expression + RPAR

        # Order matters: assignment before plain variable reference
        primary = (
            number |
            boolean |
            function_expr |
            if_expr |
            while_expr |
            print_expr |
            var_decl |
            assignment |
            variable |
            parenthesized
        )

        # An argument list must open on the callee's line; a line starting
        # with '(' begins a new statement
        call_open = Suppress(Regex(r"[ \t]*\(")).leave_whitespace()
        arguments = Group(call_open + PyParsingOptional(DelimitedList(expression)) + RPAR)
        call = (primary + ZeroOrMore(arguments)).set_parse_action(make_call)

        # Operator precedence, tightest first; every level is left-associative
        expression <<= infix_notation(call, [
            (one_of("* / %"), 2, OpAssoc.LEFT, make_binary),
            (one_of("+ -"), 2, OpAssoc.LEFT, make_binary),
            (one_of("<= >= < > =="), 2, OpAssoc.LEFT, make_binary),
        ])

        statement <<= (expression + PyParsingOptional(SEMI)) | SEMI

        program = ZeroOrMore(statement) + StringEnd()
        program.ignore(cpp_style_comment)

        single_expression = expression + StringEnd()
        single_expression.ignore(cpp_style_comment)

        # Store the main parsers
        self.program = program
        self.statement = statement
        self.expression = expression
        self.single_expression = single_expression
        self.block = block
        self.identifier = identifier

    def parse_program(self, text: str, filename: str = "<input>") -> List[Tuple]:
        """Parse a complete FWJS program into a list of statement tuples"""
        try:
            result = self.program.parse_string(text, parse_all=True)
        except ParseBaseException as e:
            raise FWJSErrorHandler(text, filename).enhance_parse_exception(e) from e
        except RecursionError as e:
            raise FWJSParseError("Expression nested too deeply", filename=filename) from e
        statements = list(result)
        if self.debug:
            logger.debug("Parsed %d statements from %s", len(statements), filename)
        return statements

    def parse_expression(self, text: str, filename: str = "<input>") -> Tuple:
        """Parse a single FWJS expression"""
        try:
            result = self.single_expression.parse_string(text, parse_all=True)
        except ParseBaseException as e:
            raise FWJSErrorHandler(text, filename).enhance_parse_exception(e) from e
        except RecursionError as e:
            raise FWJSParseError("Expression nested too deeply", filename=filename) from e
        return result[0]


class FWJSParser:
    """Main FWJS parser"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = FWJSGrammar(debug)

    def parse_file(self, filepath: str) -> List[Tuple]:
        """Parse an FWJS source file"""
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                content = f.read()
        except UnicodeDecodeError as e:
            raise FWJSParseError(f"Cannot decode file {filepath}: {e}", filename=filepath) from e
        return self.grammar.parse_program(content, filepath)

    def parse_string(self, text: str, filename: str = "<input>") -> List[Tuple]:
        """Parse FWJS source code from string"""
        return self.grammar.parse_program(text, filename)

    def parse_expression(self, text: str, filename: str = "<input>") -> Tuple:
        """Parse a single FWJS expression"""
        return self.grammar.parse_expression(text, filename)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> FWJSParser:
    """Create an FWJS parser"""
    return FWJSParser(debug=debug)


def create_debug_parser() -> FWJSParser:
    """Create an FWJS parser with debug enabled"""
    return FWJSParser(debug=True)


def pretty_print_parse_tree(node: Any, indent: int = 0) -> str:
    """Pretty print parser output for debugging"""
    pad = "  " * indent
    if isinstance(node, list):
        return "".join(pretty_print_parse_tree(item, indent) for item in node)
    if not isinstance(node, tuple):
        return f"{pad}{node!r}\n"

    node_type, value = node
    if isinstance(value, dict):
        result = f"{pad}{node_type}\n"
        for key, child in value.items():
            if isinstance(child, (tuple, list)):
                result += f"{pad}  {key}:\n" + pretty_print_parse_tree(child, indent + 2)
            else:
                result += f"{pad}  {key}: {child!r}\n"
        return result
    if isinstance(value, (tuple, list)):
        return f"{pad}{node_type}\n" + pretty_print_parse_tree(value, indent + 1)
    return f"{pad}{node_type}({value!r})\n"
