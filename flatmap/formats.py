from datetime import date
from enum import Enum
from typing import Any, Callable

from .errors import DeclarationError

Format = Callable[[Any], Any]

_formats: dict[str, Format] = {}

def register_format(name: str) -> Callable[[Format], Format]:
    def decorator(fn: Format) -> Format:
        _formats[name] = fn
        return fn
    return decorator

def get_format(name: str) -> Format:
    try:
        return _formats[name]
    except KeyError:
        raise DeclarationError(f"Unknown format '{name}'") from None

def resolve_format(format: str | Format | None) -> Format | None:
    if format is None or callable(format):
        return format
    return get_format(format)

@register_format("enum")
def enum_format(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value

@register_format("date")
def date_format(value: Any) -> Any:
    # datetime is a date subclass
    return value.isoformat() if isinstance(value, date) else value

@register_format("str")
def str_format(value: Any) -> Any:
    return None if value is None else str(value)
