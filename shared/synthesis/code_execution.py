from __future__ import annotations

import ast
import operator
import re
from typing import Any


PRINT_CALL = re.compile(r"print\(((?:[^()]|\([^()]*\))+)\)")
ARITHMETIC_CHARS = re.compile(r"^[\d\s+\-*/().%]+$")
NUMBER = re.compile(r"^-?\d+(\.\d+)?$")

_BINARY_OPERATORS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}
_UNARY_OPERATORS = {ast.UAdd: operator.pos, ast.USub: operator.neg}


def evaluate_arithmetic(expression: str) -> int | float:
    """Evaluates literal arithmetic only; names, calls and attributes are rejected."""
    tree = ast.parse(expression.strip(), mode="eval")
    return _evaluate(tree.body)


def _evaluate(node: ast.AST) -> int | float:
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
        return node.value
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPERATORS:
        left, right = _evaluate(node.left), _evaluate(node.right)
        if isinstance(node.op, ast.Pow) and abs(right) > 100:
            raise ValueError("exponent too large")
        return _BINARY_OPERATORS[type(node.op)](left, right)
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPERATORS:
        return _UNARY_OPERATORS[type(node.op)](_evaluate(node.operand))
    raise ValueError(f"unsupported expression element: {type(node).__name__}")


def _format_number(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def simulate_print(argument: str) -> str:
    argument = argument.strip()
    if argument[:1] in {'"', "'"} or argument[:2] in {'f"', "f'"}:
        return argument.lstrip("f").strip("\"'")
    if NUMBER.match(argument):
        return argument
    if ARITHMETIC_CHARS.match(argument) and any(op in argument for op in "+-*/"):
        try:
            return _format_number(evaluate_arithmetic(argument))
        except (ValueError, SyntaxError, ArithmeticError, RecursionError):
            return argument
    return argument


def simulate_execution(code: str) -> dict[str, str]:
    prints = PRINT_CALL.findall(code)
    if prints:
        output = "\n".join(simulate_print(argument) for argument in prints)
    elif "import" in code:
        output = "Modules imported successfully."
    elif "def " in code or "class " in code:
        output = "Function/class defined successfully."
    elif "=" in code and "==" not in code:
        output = "Variable assignment completed."
    elif "for " in code or "while " in code:
        output = "Loop executed successfully."
    else:
        output = "Code executed successfully."
    return {"outcome": "OUTCOME_OK", "output": output}


def attach_execution_results(parts: list[dict[str, Any]]) -> list[dict[str, Any]]:
    result: list[dict[str, Any]] = []
    for part in parts:
        result.append(part)
        executable = part.get("executableCode")
        if executable:
            result.append({"codeExecutionResult": simulate_execution(str(executable.get("code", "")))})
    return result
