from typing import TYPE_CHECKING, Any, Callable

from pydantic import TypeAdapter, ValidationError

if TYPE_CHECKING:
    from .mapper import Mapper

Check = Callable[["Mapper"], None]

def _blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return not value
    return False

def presence(*names: str) -> Check:
    def check(mapper: "Mapper") -> None:
        for name in names:
            mapping = mapper.mapping(name)
            if _blank(mapping.read()):
                mapper.errors.add(mapping.flat_name, "can't be blank")
    return check

def conforms(name: str, type_: Any, message: str | None = None) -> Check:
    """ Flag the mapping unless its value validates as ``type_`` (``None`` is left to ``presence``) """
    adapter = TypeAdapter(type_)

    def check(mapper: "Mapper") -> None:
        mapping = mapper.mapping(name)
        value = mapping.read()
        if value is None:
            return
        try:
            adapter.validate_python(value)
        except ValidationError as e:
            mapper.errors.add(mapping.flat_name, message or e.errors()[0]["msg"])
    return check
