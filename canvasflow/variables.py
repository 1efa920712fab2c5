# canvasflow/variables.py
import re
from typing import Any, List, Mapping, Tuple

from .models import VariableValue

PLACEHOLDER = re.compile(r"\{([a-zA-Z0-9_]+)\}")


def _render(value: VariableValue) -> str:
    # the canvas sends JSON booleans; keep their spelling
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def substitute(text: Any, context: Mapping[str, VariableValue]) -> Any:
    """Replace {name} placeholders with values from context.

    Unknown names (and names bound to None) are left in place verbatim.
    Anything that is not a string is returned unchanged.
    """
    if not isinstance(text, str) or not text:
        return text

    def _replace(match: "re.Match[str]") -> str:
        value = context.get(match.group(1))
        if value is None:
            return match.group(0)
        return _render(value)

    return PLACEHOLDER.sub(_replace, text)


def substitute_in_object(value: Any, context: Mapping[str, VariableValue]) -> Any:
    """Apply substitute() to every string leaf of nested dicts/lists/tuples."""
    if isinstance(value, str):
        return substitute(value, context)
    if isinstance(value, dict):
        return {k: substitute_in_object(v, context) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(substitute_in_object(v, context) for v in value)
    return value


def extract_variables(text: Any) -> List[str]:
    if not isinstance(text, str):
        return []
    return PLACEHOLDER.findall(text)


def validate_variables(text: Any, context: Mapping[str, VariableValue]) -> Tuple[bool, List[str]]:
    missing = [name for name in extract_variables(text) if name not in context]
    return not missing, missing
