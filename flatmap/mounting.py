import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .errors import DeclarationError, TargetResolutionError
from .mapping import parse_options
from .targets import Target

if TYPE_CHECKING:
    from .mapper import Mapper

logger = logging.getLogger(__name__)

_mapper_classes: dict[str, type] = {}

def register_mapper_class(cls: type) -> None:
    if cls.__name__ in _mapper_classes:
        logger.debug(f"Mapper class name {cls.__name__} registered again, replacing {_mapper_classes[cls.__name__]}")
    _mapper_classes[cls.__name__] = cls

def camelize(name: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in name.split("_"))

def mapper_class_for(name: str, mapper_class: type | str | None = None) -> type:
    """ ``email_address`` resolves to ``EmailAddressMapper`` unless a class (or class name) is given """
    if isinstance(mapper_class, type):
        return mapper_class
    class_name = mapper_class or f"{camelize(name)}Mapper"
    try:
        return _mapper_classes[class_name]
    except KeyError:
        raise DeclarationError(f"Cannot find mapper class {class_name} for mounting '{name}'") from None

def resolve_target(name: str, target: Any, host: "Mapper") -> Any:
    """
    Target of a child mapper: the host target's ``name`` attribute by default,
    the result of a resolver called with the host's backing object, or a literal.
    """
    if target is None:
        resolved = host.target.get(name)
    elif callable(target) and not isinstance(target, Target):
        resolved = target(host.target.obj)
    else:
        resolved = target
    if resolved is None:
        raise TargetResolutionError(name, host)
    return resolved

class MountingOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    mapper_class: type | str | None = None
    target: Any = None
    traits: tuple[str, ...] = ()
    suffix: str | None = None
    extension: type | None = None

    @field_validator("traits", mode="before")
    @classmethod
    def _listify_traits(cls, value: Any) -> Any:
        if isinstance(value, str):
            return (value,)
        return value

class Mount:
    """
    Class-body marker for a mounted mapper:

        class CustomerAccountMapper(Mapper):
            customer = Mount(traits=["with_phone"])
            phone = Mount(target=lambda account: account.phones[1], suffix="_2")
    """
    def __init__(self, **options: Any):
        self.options = parse_options(MountingOptions, options)

    def definition(self, name: str) -> "MountingDefinition":
        return MountingDefinition(name, self.options)

@dataclass(frozen=True)
class MountingDefinition:
    name: str
    options: MountingOptions

    def mount(self, host: "Mapper") -> "Mapper":
        mapper_class = mapper_class_for(self.name, self.options.mapper_class)
        target = resolve_target(self.name, self.options.target, host)
        logger.debug(f"Mounting {mapper_class.__name__} as '{self.name}' on {host!r}")
        return mapper_class(
            target,
            *self.options.traits,
            extension=self.options.extension,
            owner=host,
            node_name=self.name,
            suffix=self.options.suffix,
        )

def find_mounting(mountings: list["Mapper"], name: str) -> Optional["Mapper"]:
    for mounted in mountings:
        if mounted.node_name == name or mounted.full_name == name:
            return mounted
    return None
