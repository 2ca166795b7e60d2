"""
Error types and enhanced parse-error reporting for FWJS
Runtime errors form a small hierarchy so drivers and tests can discriminate
"""

from typing import Any, Dict, List, Optional
from pyparsing import ParseBaseException
import re


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_parse_error(
    message: str,
    location: int,
    line: int,
    column: int,
    expected: Optional[List[str]] = None,
    got: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable parse error structure"""
    return {
        'message': message,
        'location': location,
        'line': line,
        'column': column,
        'expected': expected or [],
        'got': got,
        'context': context,
        'suggestions': suggestions or []
    }


def format_parse_error(error: Dict) -> str:
    """Format parse error as string"""
    error_msg = f"Parse error at line {error['line']}, column {error['column']}:\n"
    error_msg += f"  {error['message']}\n"

    if error['expected']:
        error_msg += f"  Expected: {', '.join(error['expected'])}\n"

    if error['got']:
        error_msg += f"  Got: {error['got']}\n"

    if error['context']:
        error_msg += f"  Context:\n{error['context']}\n"

    if error['suggestions']:
        error_msg += "  Suggestions:\n"
        for suggestion in error['suggestions']:
            error_msg += f"    - {suggestion}\n"

    return error_msg


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^ Error here")

    return '\n'.join(context_parts)


def extract_expected(exc: ParseBaseException) -> List[str]:
    """Extract expected tokens from exception"""
    expected = []

    # pyparsing reports the failed element as "Expected <element>, found ..."
    msg = str(exc)
    expected_match = re.search(r"Expected\s+(.+?)(?:,\s+found|\s+\(at|$)", msg)
    if expected_match:
        expected.append(expected_match.group(1))

    return expected if expected else ["valid syntax"]


def extract_got(source_text: str, line_num: int, col_num: int) -> str:
    """Extract what was actually found at the error location"""
    lines = source_text.split('\n')

    if 0 < line_num <= len(lines):
        error_line = lines[line_num - 1]
        if col_num <= len(error_line):
            start = max(0, col_num - 1)
            end = min(len(error_line), col_num + 10)
            got_text = error_line[start:end].strip()
            if got_text:
                return f"'{got_text}'"
        return "end of line"
    return "end of input"


def generate_suggestions(source_text: str, got: str, expected: List[str]) -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []
    expected_text = " ".join(expected)

    if source_text.count('(') != source_text.count(')'):
        suggestions.append("Parentheses are unbalanced - check for a missing ')'")

    if source_text.count('{') != source_text.count('}'):
        suggestions.append("Braces are unbalanced - check for a missing '}'")

    if "'='" in expected_text and "==" in got:
        suggestions.append("Use '=' to assign and '==' to compare")

    if re.match(r"'(var|function|if|else|while|print|true|false)\b", got):
        suggestions.append("Keywords cannot be used as variable or parameter names")

    if "'('" in expected_text and re.match(r"'(if|while|print|function)\b", got):
        suggestions.append("'if', 'while', 'print' and 'function' need parentheses, e.g. if (x) { ... }")

    return suggestions


def enhance_parse_exception_dict(exc: ParseBaseException, source_text: str) -> Dict:
    """Convert pyparsing exception to enhanced FWJS error dict"""
    line_num = exc.lineno
    col_num = exc.column

    context = get_context_lines(source_text, line_num, col_num)
    expected = extract_expected(exc)
    got = extract_got(source_text, line_num, col_num)
    suggestions = generate_suggestions(source_text, got, expected)

    return make_parse_error(
        message=exc.msg,
        location=exc.loc,
        line=line_num,
        column=col_num,
        expected=expected,
        got=got,
        context=context,
        suggestions=suggestions
    )


# ============================================================================
# FRONT-END ERRORS
# ============================================================================

class FWJSParseError(Exception):
    """Syntax error in FWJS source text"""
    def __init__(self, message: str, location: int = 0, line: int = 0, column: int = 0,
                 expected: Optional[List[str]] = None, got: Optional[str] = None,
                 context: Optional[str] = None, suggestions: Optional[List[str]] = None,
                 filename: str = "<input>"):
        self.message = message
        self.location = location
        self.line = line
        self.column = column
        self.expected = expected or []
        self.got = got
        self.context = context
        self.suggestions = suggestions or []
        self.filename = filename
        super().__init__(message)

    def __str__(self) -> str:
        error_dict = make_parse_error(
            self.message, self.location, self.line, self.column,
            self.expected, self.got, self.context, self.suggestions
        )
        return f"{self.filename}: {format_parse_error(error_dict)}"


class FWJSSemanticsError(Exception):
    """Well-formed syntax that does not describe a valid expression tree"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Semantics error: {message}")


class FWJSErrorHandler:
    """Wraps parse failures of one source text"""
    def __init__(self, source_text: str, filename: str = "<input>"):
        self.source_text = source_text
        self.filename = filename

    def enhance_parse_exception(self, exc: ParseBaseException) -> FWJSParseError:
        """Convert pyparsing exception to enhanced FWJS error"""
        error_dict = enhance_parse_exception_dict(exc, self.source_text)
        return FWJSParseError(
            message=error_dict['message'],
            location=error_dict['location'],
            line=error_dict['line'],
            column=error_dict['column'],
            expected=error_dict['expected'],
            got=error_dict['got'],
            context=error_dict['context'],
            suggestions=error_dict['suggestions'],
            filename=self.filename
        )


# ============================================================================
# RUNTIME ERRORS
# ============================================================================

class FWJSRuntimeError(Exception):
    """Base class for every error raised while evaluating an expression tree"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class TypeMismatchError(FWJSRuntimeError):
    """An operation received a value of the wrong kind"""

    def __init__(self, message: str, expected: str, values: List[Dict[str, Any]]):
        self.expected = expected
        self.values = values
        super().__init__(message)


class NotCallableError(TypeMismatchError):
    """The target of a function application is not a closure"""

    def __init__(self, message: str, value: Dict[str, Any]):
        super().__init__(message, "Closure", [value])
        self.value = value


class ArityMismatchError(FWJSRuntimeError):
    def __init__(self, message: str, expected: int, got: int):
        self.expected = expected
        self.got = got
        super().__init__(message)


class UnboundVariableError(FWJSRuntimeError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unbound variable: {name}")


class DuplicateDeclarationError(FWJSRuntimeError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Variable '{name}' is already declared in this scope")


class DivisionByZeroError(FWJSRuntimeError):
    def __init__(self, op: str, dividend: int):
        self.op = op
        self.dividend = dividend
        super().__init__(f"Cannot {op} {dividend} by zero")


class ResourceExhaustedError(FWJSRuntimeError):
    """Evaluation ran past its step budget or the host call stack"""

    def __init__(self, message: str, limit: Optional[int] = None):
        self.limit = limit
        super().__init__(message)
