import math
from .errors import MalformedFilterExpression
from .utils import _format_value, _type_name, _is_number

def _divided_by(a, b):
    if isinstance(a, int) and isinstance(b, int):
        return a // b
    return a / b

def _modulo(a, b):
    return a % b

def _round(a, digits=0):
    if not isinstance(digits, int) or isinstance(digits, bool):
        raise TypeError("digits")
    scale = 10 ** digits
    result = math.floor(abs(a) * scale + 0.5) / scale
    result = math.copysign(result, a)
    if digits <= 0:
        return int(result)
    return result

def _at_least(a, b):
    result = max(a, b)
    return float(result) if isinstance(a, float) or isinstance(b, float) else result

def _at_most(a, b):
    result = min(a, b)
    return float(result) if isinstance(a, float) or isinstance(b, float) else result

def _append(a, b):
    return _format_value(a) + _format_value(b)

def _prepend(a, b):
    return _format_value(b) + _format_value(a)

# name -> (min operands, max operands, operand kind, function)
FILTERS = {
    'plus':       (1, 1, 'number', lambda a, b: a + b),
    'minus':      (1, 1, 'number', lambda a, b: a - b),
    'times':      (1, 1, 'number', lambda a, b: a * b),
    'divided_by': (1, 1, 'number', _divided_by),
    'modulo':     (1, 1, 'number', _modulo),
    'at_least':   (1, 1, 'number', _at_least),
    'at_most':    (1, 1, 'number', _at_most),
    'abs':        (0, 0, 'number', abs),
    'ceil':       (0, 0, 'number', lambda a: int(math.ceil(a))),
    'floor':      (0, 0, 'number', lambda a: int(math.floor(a))),
    'round':      (0, 1, 'number', _round),
    'append':     (1, 1, 'any', _append),
    'prepend':    (1, 1, 'any', _prepend),
}

_ZERO_CHECKED = {'divided_by', 'modulo'}


def apply_filter(name: str, value, args: list, position=None):
    """
    Applies one named filter to `value`.

    Numeric filters take and return numbers: integer inputs with integer
    operands stay integers, anything involving a float becomes a float.
    """
    if name not in FILTERS:
        raise MalformedFilterExpression(f"Unknown filter '{name}'", position)
    lo, hi, kind, func = FILTERS[name]
    if not lo <= len(args) <= hi:
        expected = str(lo) if lo == hi else f"{lo} to {hi}"
        raise MalformedFilterExpression(
            f"Filter '{name}' takes {expected} operand(s), got {len(args)}", position)

    if kind == 'number':
        if not _is_number(value):
            raise MalformedFilterExpression(
                f"Filter '{name}' expects a numeric input, got {_type_name(value)}", position)
        for arg in args:
            if not _is_number(arg):
                raise MalformedFilterExpression(
                    f"Filter '{name}' expects a numeric operand, got {_type_name(arg)}", position)
        if name in _ZERO_CHECKED and args[0] == 0:
            raise MalformedFilterExpression(f"Division by zero in filter '{name}'", position)
    try:
        result = func(value, *args)
    except (TypeError, ValueError, OverflowError):
        raise MalformedFilterExpression(f"Invalid operand for filter '{name}'", position) from None
    if isinstance(result, float) and not math.isfinite(result):
        raise MalformedFilterExpression(f"Filter '{name}' produced a non-finite number", position)
    return result


def apply_chain(value, filters: list):
    """Applies `(name, args, position)` filters left to right."""
    for name, args, position in filters:
        value = apply_filter(name, value, args, position)
    return value
