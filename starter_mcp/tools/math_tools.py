from __future__ import annotations

import math
from decimal import Decimal

from mcp import types

from ..models import SumArguments
from . import ToolRegistry, text_result, tool_spec


def format_number(value: float) -> str:
    """
    Render a float the way a JSON client expects to read it back.

    Follows JavaScript's `String(number)`: the shortest round-trip digits,
    fixed notation for 1e-6 <= |value| < 1e21 and exponent notation outside
    it (`1e-7`, `1.5e+21`), with `Infinity` and `NaN` for non-finite values.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).as_tuple()
    digits = "".join(str(d) for d in digit_tuple).rstrip("0")
    # Scientific exponent of the leading digit, plus one.
    point = len(digit_tuple) + exponent

    if len(digits) <= point <= 21:
        body = digits + "0" * (point - len(digits))
    elif 0 < point <= 21:
        body = f"{digits[:point]}.{digits[point:]}"
    elif -6 < point <= 0:
        body = "0." + "0" * -point + digits
    else:
        power = point - 1
        mantissa = digits if len(digits) == 1 else f"{digits[0]}.{digits[1:]}"
        body = f"{mantissa}e{'+' if power >= 0 else '-'}{abs(power)}"
    return sign + body


async def _handle_sum(arguments: SumArguments) -> types.CallToolResult:
    return text_result(format_number(arguments.a + arguments.b))


def register_tools(registry: ToolRegistry) -> None:
    registry.add_tool(
        tool_spec("sum", "Adds two numbers together", SumArguments),
        SumArguments,
        _handle_sum,
    )
