"""Condition block: if/else on its input."""

import math
from collections.abc import Callable
from typing import Any

from blockflow.blocks.base import BlockContext, BlockDefinition
from blockflow.blocks.registry import register_block
from blockflow.blocks.values import format_scalar
from blockflow.errors import BlockError
from blockflow.graph.node import NodeSpec


def _to_number(text: str) -> float | None:
    try:
        number = float(text.strip())
    except ValueError:
        return None
    return None if math.isnan(number) else number


def _compare_numbers(check: Callable[[float, float], bool]) -> Callable[[str, str], bool]:
    def compare(left: str, right: str) -> bool:
        a, b = _to_number(left), _to_number(right)
        return a is not None and b is not None and check(a, b)

    return compare


def _is_empty(value: Any) -> bool:
    if value is None or value == "":
        return True
    if isinstance(value, (list, dict)):
        return len(value) == 0
    return False


_NUMERIC = {
    "greaterThan": _compare_numbers(lambda a, b: a > b),
    "lessThan": _compare_numbers(lambda a, b: a < b),
    "greaterThanOrEqual": _compare_numbers(lambda a, b: a >= b),
    "lessThanOrEqual": _compare_numbers(lambda a, b: a <= b),
}

_TEXTUAL = {
    "equals": lambda a, b: a == b,
    "notEquals": lambda a, b: a != b,
    "contains": lambda a, b: b in a,
    "notContains": lambda a, b: b not in a,
    "startsWith": lambda a, b: a.startswith(b),
    "endsWith": lambda a, b: a.endswith(b),
}


def evaluate(operator: str, value: Any, compare_value: Any, case_sensitive: bool = False) -> bool:
    """Evaluate ``operator`` on a block input; raises ValueError for unknown operators."""
    text = format_scalar(value)
    other = format_scalar(compare_value)

    if operator in _TEXTUAL:
        if not case_sensitive:
            text, other = text.lower(), other.lower()
        return _TEXTUAL[operator](text, other)
    if operator in _NUMERIC:
        return _NUMERIC[operator](text, other)
    if operator == "exists":
        return value is not None and value != ""
    if operator == "isEmpty":
        return _is_empty(value)
    if operator == "isNumber":
        number = _to_number(text)
        return number is not None and math.isfinite(number)
    raise ValueError(f"Unknown operator: {operator}")


@register_block()
class ConditionBlock(BlockDefinition):
    """Returns ``if_true_value`` or ``if_false_value`` depending on the input."""

    block_type = "condition"
    label = "Condition"
    description = "Execute conditional logic (if/else) on input"
    default_config = {
        "operator": "equals",
        "compare_value": "",
        "if_true_value": "true",
        "if_false_value": "false",
        "case_sensitive": False,
    }

    async def execute(self, node: NodeSpec, input: Any, context: BlockContext) -> Any:
        config = self.resolve_config(node)
        try:
            result = evaluate(
                config.get("operator", "equals"),
                input,
                config.get("compare_value", ""),
                bool(config.get("case_sensitive", False)),
            )
        except ValueError as e:
            raise BlockError(f"Condition evaluation failed: {e}") from e

        if result:
            return config.get("if_true_value", "true")
        return config.get("if_false_value", "false")
