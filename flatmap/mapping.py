from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Literal, Mapping as MappingType, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import DeclarationError
from .formats import resolve_format
from .multiparam import assemble, extract_multiparams, has_multiparams

if TYPE_CHECKING:
    from .mapper import Mapper

T = TypeVar("T", bound=BaseModel)

def parse_options(model: type[T], options: dict[str, Any]) -> T:
    try:
        return model(**options)
    except ValidationError as e:
        raise DeclarationError(f"Invalid {model.__name__}: {e}") from e

class MappingOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    format: str | Callable[[Any], Any] | None = None
    reader: Literal[False] | str | Callable[..., Any] | None = None
    writer: Literal[False] | str | Callable[..., Any] | None = None
    multiparam: Callable[..., Any] | None = None

class Map:
    """
    Class-body marker for a mapping. The attribute name it is assigned to
    becomes the mapping name:

        class CustomerMapper(Mapper):
            first_name = last_name = Map()
            dob = Map("date_of_birth", format="date", multiparam=date)
    """
    def __init__(self, target_attribute: str | None = None, **options: Any):
        self.target_attribute = target_attribute
        self.options = parse_options(MappingOptions, options)

    def definition(self, name: str) -> "MappingDefinition":
        return MappingDefinition(name, self.target_attribute or name, self.options)

@dataclass(frozen=True)
class MappingDefinition:
    name: str
    target_attribute: str
    options: MappingOptions

class Mapping:
    """ A mapping definition bound to the mapper node that owns it """

    def __init__(self, node: "Mapper", definition: MappingDefinition):
        self.node = node
        self.name = definition.name
        self.target_attribute = definition.target_attribute
        self.options = definition.options
        self.flat_name = f"{self.name}{node.suffix or ''}"
        self.format = resolve_format(self.options.format)

    @property
    def readable(self) -> bool:
        return self.options.reader is not False

    @property
    def writable(self) -> bool:
        return self.options.writer is not False

    def read(self) -> Any:
        reader = self.options.reader
        if reader is None:
            return self.node.target.get(self.target_attribute)
        if reader is False:
            return None
        if isinstance(reader, str):
            return getattr(self.node, reader)(self)
        return reader(self.node.target.obj)

    def read_formatted(self) -> Any:
        value = self.read()
        if self.format is None:
            return value
        return self.format(value)

    def write(self, value: Any) -> None:
        writer = self.options.writer
        if writer is False:
            return
        if writer is None:
            self.node.target.set(self.target_attribute, value)
        elif isinstance(writer, str):
            getattr(self.node, writer)(self, value)
        else:
            writer(self.node.target.obj, value)

    def write_from_params(self, params: MappingType[str, Any]) -> bool:
        """ Write this mapping's value out of params, return whether it was present """
        if self.flat_name in params:
            self.write(params[self.flat_name])
            return True
        assembler = self.options.multiparam
        if assembler is not None and has_multiparams(params, self.flat_name):
            self.write(assemble(assembler, extract_multiparams(params, self.flat_name)))
            return True
        return False

    def __repr__(self) -> str:
        return f"Mapping({self.flat_name} -> {self.target_attribute})"
