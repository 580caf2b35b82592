"""
Transform Expressions

Restricted expression language used by migrate_collection's dataTransforms.
Each expression sees one variable, `oldValue` (alias `value`), bound to the
field's current value, and produces the field's new value.

Expressions are parsed with `ast` and checked against a whitelist before
anything is evaluated; evaluation walks the checked tree directly, so no
Python code is ever executed. JavaScript-style spellings that PocketBase users
tend to write are accepted and mapped first:

    oldValue * 100
    oldValue.toUpperCase()
    oldValue === null ? 'n/a' : String(oldValue)
    parseFloat(oldValue) / 2
    value.strip().title()
"""

import ast
import math
import operator
import re
from typing import Any, Callable

VALUE_NAMES = ("oldValue", "value")

MAX_EXPONENT = 100
MAX_EXPRESSION_LENGTH = 1000
MAX_SEQUENCE_LENGTH = 1_000_000
MAX_INTEGER_BITS = 10_000


class ExpressionError(ValueError):
    """Invalid transform expression, or a failure while evaluating one."""


# ============================================================================
# JavaScript-compatible coercions
# ============================================================================

_FLOAT_PREFIX = re.compile(r"^[+-]?(\d+\.?\d*([eE][+-]?\d+)?|\.\d+([eE][+-]?\d+)?|Infinity)")
_INT_PREFIX = re.compile(r"^[+-]?\d+")


def parse_float(value: Any) -> float:
    """
    Leading-number parse in the manner of JavaScript's parseFloat.

    Returns NaN when no number can be read. Numbers pass through unchanged.
    """
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    if value is None:
        return math.nan
    match = _FLOAT_PREFIX.match(str(value).strip())
    if not match:
        return math.nan
    return float(match.group(0).replace("Infinity", "inf"))


def parse_int(value: Any) -> Any:
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    match = _INT_PREFIX.match(str(value).strip()) if value is not None else None
    return int(match.group(0)) if match else math.nan


def to_number(value: Any) -> Any:
    """JavaScript Number(): '' and None are 0, bad strings are NaN."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    text = str(value).strip()
    if not text:
        return 0
    try:
        number = float(text)
    except ValueError:
        return math.nan
    return int(number) if number.is_integer() else number


def to_js_string(value: Any) -> str:
    if isinstance(value, (list, tuple)) and _size(value) > MAX_SEQUENCE_LENGTH:
        raise ExpressionError("String result too large")
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _truthy(value: Any) -> bool:
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def _add(left: Any, right: Any) -> Any:
    # JavaScript semantics: anything plus a string concatenates
    if isinstance(left, str) != isinstance(right, str) and (isinstance(left, str) or isinstance(right, str)):
        return to_js_string(left) + to_js_string(right)
    return operator.add(left, right)


def _size(value: Any) -> int:
    """Approximate size of a value: characters, items, or decimal digits."""
    if isinstance(value, str):
        return len(value)
    if isinstance(value, (list, tuple)):
        return len(value) + sum(_size(item) for item in value)
    if isinstance(value, int):
        return value.bit_length() // 3 + 1
    return 1


def _bounded(result: Any) -> Any:
    if isinstance(result, int) and result.bit_length() > MAX_INTEGER_BITS:
        raise ExpressionError("Integer result too large")
    if isinstance(result, (str, list, tuple)) and _size(result) > MAX_SEQUENCE_LENGTH:
        raise ExpressionError("Result too large")
    return result


def _multiply(left: Any, right: Any) -> Any:
    for sequence, count in ((left, right), (right, left)):
        if isinstance(sequence, (str, list, tuple)) and isinstance(count, int):
            if _size(sequence) * count > MAX_SEQUENCE_LENGTH:
                raise ExpressionError("Repetition result too large")
    if isinstance(left, int) and isinstance(right, int):
        if left.bit_length() + right.bit_length() > MAX_INTEGER_BITS:
            raise ExpressionError("Integer result too large")
    return operator.mul(left, right)


def _power(left: Any, right: Any) -> Any:
    if isinstance(right, (int, float)) and abs(right) > MAX_EXPONENT:
        raise ExpressionError(f"Exponent too large: {right}")
    if isinstance(left, int) and isinstance(right, int) and right > 0:
        if abs(left).bit_length() * right > MAX_INTEGER_BITS:
            raise ExpressionError("Integer result too large")
    return operator.pow(left, right)



def _check_replace_size(text: str, args: list):
    if len(args) < 2 or not all(isinstance(arg, str) for arg in args[:2]):
        return
    old, new = args[0], args[1]
    count = text.count(old)
    if len(args) > 2 and isinstance(args[2], int) and args[2] >= 0:
        count = min(count, args[2])
    if len(text) + count * (len(new) - len(old)) > MAX_SEQUENCE_LENGTH:
        raise ExpressionError("Result too large")


ALLOWED_FUNCTIONS: dict[str, Callable] = {
    "str": to_js_string,
    "int": int,
    "float": float,
    "bool": _truthy,
    "round": round,
    "abs": abs,
    "len": len,
    "min": min,
    "max": max,
    "lower": lambda text: str(text).lower(),
    "upper": lambda text: str(text).upper(),
    # JavaScript aliases
    "String": to_js_string,
    "Number": to_number,
    "Boolean": _truthy,
    "parseInt": parse_int,
    "parseFloat": parse_float,
}

# Method name -> str method it maps to
ALLOWED_METHODS = {
    "upper": "upper",
    "lower": "lower",
    "strip": "strip",
    "title": "title",
    "capitalize": "capitalize",
    "replace": "replace",
    "split": "split",
    "startswith": "startswith",
    "endswith": "endswith",
    "toUpperCase": "upper",
    "toLowerCase": "lower",
    "trim": "strip",
}

BINARY_OPERATORS = {
    ast.Add: _add,
    ast.Sub: operator.sub,
    ast.Mult: _multiply,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: _power,
}

UNARY_OPERATORS = {
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
    ast.Not: lambda operand: not _truthy(operand),
}

COMPARISON_OPERATORS = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.In: lambda left, right: left in right,
    ast.NotIn: lambda left, right: left not in right,
    ast.Is: operator.is_,
    ast.IsNot: operator.is_not,
}


# ============================================================================
# JavaScript spelling -> Python source
# ============================================================================

_JS_WORDS = {"true": "True", "false": "False", "null": "None", "undefined": "None"}
_JS_OPERATORS = [("===", "=="), ("!==", "!="), ("&&", " and "), ("||", " or ")]


def _segments(source: str) -> list[tuple[bool, str]]:
    """Split source into (is_string_literal, text) runs."""
    segments = []
    current = ""
    quote = None
    i = 0
    while i < len(source):
        char = source[i]
        if quote:
            current += char
            if char == "\\" and i + 1 < len(source):
                current += source[i + 1]
                i += 1
            elif char == quote:
                segments.append((True, current))
                current = ""
                quote = None
        elif char in ("'", '"'):
            if current:
                segments.append((False, current))
            current = char
            quote = char
        else:
            current += char
        i += 1
    if quote:
        raise ExpressionError("Unterminated string literal")
    if current:
        segments.append((False, current))
    return segments


def _translate_code(code: str) -> str:
    for js, python in _JS_OPERATORS:
        code = code.replace(js, python)
    code = re.sub(r"!(?!=)", " not ", code)
    return re.sub(r"\b(true|false|null|undefined)\b", lambda m: _JS_WORDS[m.group(1)], code)


def _find_top_level(source: str, start: int, targets: str) -> int:
    """Index of the first target char at bracket depth 0 outside strings, or -1."""
    depth = 0
    offset = 0
    for is_literal, text in _segments(source):
        if not is_literal:
            for i, char in enumerate(text):
                position = offset + i
                if char in "([{":
                    depth += 1
                elif char in ")]}":
                    depth -= 1
                elif depth == 0 and position >= start and char in targets:
                    return position
        offset += len(text)
    return -1


def _translate_ternary(source: str) -> str:
    """Rewrite `cond ? a : b` (right-associative) as `(a) if (cond) else (b)`."""
    question = _find_top_level(source, 0, "?")
    if question < 0:
        return source

    # Find the ':' that closes this '?', skipping nested ternaries in the middle
    pending = 0
    position = question + 1
    while True:
        position = _find_top_level(source, position, "?:")
        if position < 0:
            raise ExpressionError("Incomplete conditional expression: missing ':'")
        if source[position] == "?":
            pending += 1
        elif pending:
            pending -= 1
        else:
            break
        position += 1

    condition = source[:question]
    when_true = _translate_ternary(source[question + 1:position])
    when_false = _translate_ternary(source[position + 1:])
    return f"({when_true}) if ({condition}) else ({when_false})"


def to_python_source(expression: str) -> str:
    translated = "".join(
        text if is_literal else _translate_code(text) for is_literal, text in _segments(expression)
    )
    return _translate_ternary(translated).strip()


# ============================================================================
# Whitelist check
# ============================================================================

_ALLOWED_NODES = (
    ast.Expression, ast.Constant, ast.Name, ast.Load,
    ast.BinOp, ast.UnaryOp, ast.BoolOp, ast.Compare, ast.IfExp,
    ast.Call, ast.Attribute, ast.Subscript, ast.Slice,
    ast.List, ast.Tuple,
    ast.And, ast.Or,
    *BINARY_OPERATORS, *UNARY_OPERATORS, *COMPARISON_OPERATORS,
)


def _check_node(node: ast.AST):
    if not isinstance(node, _ALLOWED_NODES):
        raise ExpressionError(f"Unsupported syntax: {type(node).__name__}")

    if isinstance(node, ast.Name) and node.id not in VALUE_NAMES and node.id not in ("True", "False", "None"):
        raise ExpressionError(f"Unknown name '{node.id}' (use oldValue)")

    if isinstance(node, ast.Attribute):
        if node.attr != "length":
            raise ExpressionError(f"Attribute access not allowed: .{node.attr}")

    if isinstance(node, ast.Call):
        if node.keywords:
            raise ExpressionError("Keyword arguments are not allowed")
        func = node.func
        if isinstance(func, ast.Name):
            if func.id not in ALLOWED_FUNCTIONS:
                raise ExpressionError(f"Function not allowed: {func.id}")
        elif isinstance(func, ast.Attribute):
            if func.attr not in ALLOWED_METHODS:
                raise ExpressionError(f"Method not allowed: .{func.attr}()")
            _check_node(func.value)
            for arg in node.args:
                _check_node(arg)
            return
        else:
            raise ExpressionError("Only named functions and string methods can be called")
        for arg in node.args:
            _check_node(arg)
        return

    for child in ast.iter_child_nodes(node):
        _check_node(child)


# ============================================================================
# Evaluation
# ============================================================================

def _evaluate(node: ast.AST, value: Any) -> Any:
    if isinstance(node, ast.Expression):
        return _evaluate(node.body, value)

    if isinstance(node, ast.Constant):
        return node.value

    if isinstance(node, ast.Name):
        if node.id in VALUE_NAMES:
            return value
        return {"True": True, "False": False, "None": None}[node.id]

    if isinstance(node, ast.BinOp):
        return _bounded(BINARY_OPERATORS[type(node.op)](_evaluate(node.left, value), _evaluate(node.right, value)))

    if isinstance(node, ast.UnaryOp):
        return UNARY_OPERATORS[type(node.op)](_evaluate(node.operand, value))

    if isinstance(node, ast.BoolOp):
        result = None
        for operand in node.values:
            result = _evaluate(operand, value)
            if isinstance(node.op, ast.And) and not _truthy(result):
                return result
            if isinstance(node.op, ast.Or) and _truthy(result):
                return result
        return result

    if isinstance(node, ast.Compare):
        left = _evaluate(node.left, value)
        for op, comparator in zip(node.ops, node.comparators):
            right = _evaluate(comparator, value)
            if not COMPARISON_OPERATORS[type(op)](left, right):
                return False
            left = right
        return True

    if isinstance(node, ast.IfExp):
        if _truthy(_evaluate(node.test, value)):
            return _evaluate(node.body, value)
        return _evaluate(node.orelse, value)

    if isinstance(node, ast.Attribute):
        # Only `.length` passes the check
        return len(_evaluate(node.value, value))

    if isinstance(node, ast.Subscript):
        target = _evaluate(node.value, value)
        if isinstance(node.slice, ast.Slice):
            parts = [None if part is None else _evaluate(part, value)
                     for part in (node.slice.lower, node.slice.upper, node.slice.step)]
            return target[slice(*parts)]
        return target[_evaluate(node.slice, value)]

    if isinstance(node, (ast.List, ast.Tuple)):
        items = [_evaluate(item, value) for item in node.elts]
        return _bounded(items if isinstance(node, ast.List) else tuple(items))

    if isinstance(node, ast.Call):
        args = [_evaluate(arg, value) for arg in node.args]
        if isinstance(node.func, ast.Name):
            return _bounded(ALLOWED_FUNCTIONS[node.func.id](*args))
        receiver = _evaluate(node.func.value, value)
        if not isinstance(receiver, str):
            raise ExpressionError(f".{node.func.attr}() needs a string, got {type(receiver).__name__}")
        method = ALLOWED_METHODS[node.func.attr]
        if method == "replace":
            _check_replace_size(receiver, args)
        return _bounded(getattr(receiver, method)(*args))

    raise ExpressionError(f"Unsupported syntax: {type(node).__name__}")


class TransformExpression:
    """A checked expression, ready to evaluate against field values."""

    def __init__(self, source: str, tree: ast.Expression):
        self.source = source
        self._tree = tree

    def evaluate(self, old_value: Any) -> Any:
        """
        Evaluate with oldValue bound to `old_value`.

        Raises:
            ExpressionError: If evaluation fails (type mismatch, division by zero, ...)
        """
        try:
            return _evaluate(self._tree, old_value)
        except ExpressionError:
            raise
        except Exception as e:
            raise ExpressionError(f"{type(e).__name__}: {e}") from e

    def __repr__(self) -> str:
        return f"TransformExpression({self.source!r})"


def compile_expression(source: str) -> TransformExpression:
    """
    Parse and check a transform expression.

    Raises:
        ExpressionError: If the expression is empty, malformed, or uses
        anything outside the whitelist
    """
    if not isinstance(source, str) or not source.strip():
        raise ExpressionError("Expression must be a non-empty string")
    if len(source) > MAX_EXPRESSION_LENGTH:
        raise ExpressionError(f"Expression longer than {MAX_EXPRESSION_LENGTH} characters")

    python_source = to_python_source(source)
    try:
        tree = ast.parse(python_source, mode="eval")
    except SyntaxError as e:
        raise ExpressionError(f"Invalid syntax: {e.msg}") from e

    _check_node(tree)
    return TransformExpression(source, tree)
