import re
from typing import Any, Callable, Mapping

# name(1i), name(2f), name(3s)...
MULTIPARAM_KEY = re.compile(r"^(?P<name>.+)\((?P<position>\d+)(?P<cast>[ifs]?)\)$")

_casts: dict[str, Callable[[Any], Any]] = {
    "i": int,
    "f": float,
    "s": str,
    "": lambda value: value,
}

def has_multiparams(params: Mapping[str, Any], name: str) -> bool:
    return any(_match(key, name) for key in params)

def extract_multiparams(params: Mapping[str, Any], name: str) -> list[Any] | None:
    """ Collect ``name(Nx)`` keys of params into positional arguments """
    collected: dict[int, Any] = {}
    for key, value in params.items():
        match = _match(key, name)
        if match is None:
            continue
        if value is None or value == "":
            collected[int(match["position"])] = None
        else:
            collected[int(match["position"])] = _casts[match["cast"]](value)
    if not collected:
        return None
    return [collected.get(position) for position in range(1, max(collected) + 1)]

def assemble(assembler: Callable[..., Any], args: list[Any]) -> Any:
    if all(arg is None for arg in args):
        return None
    # trailing blanks are left to the assembler's defaults
    while args and args[-1] is None:
        args = args[:-1]
    return assembler(*args)

def _match(key: Any, name: str) -> re.Match | None:
    if not isinstance(key, str):
        return None
    match = MULTIPARAM_KEY.match(key)
    if match is None or match["name"] != name:
        return None
    return match
