import sys
import numpy as np

def _format_value(val) -> str:
    """Formats a template or scene value for injection into scene text."""
    if isinstance(val, bool):
        return 'true' if val else 'false'
    if isinstance(val, (int, np.integer)):
        return str(int(val))
    if isinstance(val, (float, np.floating)):
        val = float(val)
        if val == 0.0:
            return '0.0'
        return repr(val)
    if isinstance(val, (list, tuple, np.ndarray)):
        components = [_format_value(v) for v in np.asarray(val).flatten().tolist()]
        return "{" + ", ".join(components) + "}"
    return str(val)

def _type_name(val) -> str:
    """The template-level kind of a Python value, for error messages."""
    if isinstance(val, bool): return 'boolean'
    if isinstance(val, int): return 'integer'
    if isinstance(val, float): return 'float'
    if isinstance(val, str): return 'string'
    return type(val).__name__

def _is_number(val) -> bool:
    return isinstance(val, (int, float)) and not isinstance(val, bool)

def _report(level: str, message: str):
    """Writes a prefixed diagnostic line to stderr."""
    print(f"{level}: {message}", file=sys.stderr)
