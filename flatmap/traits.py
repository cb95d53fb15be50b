import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Iterable

from .mounting import resolve_target

if TYPE_CHECKING:
    from .mapper import Mapper

logger = logging.getLogger(__name__)

EXTENSION = "extension"

@dataclass(frozen=True)
class TraitDeclaration:
    """
    Named template of a mapper, built on top of its host only when the host
    is initialized with the trait's name. The body is a Mapper subclass
    whose declarations are merged into the host. It shares the host's target
    unless a ``target`` option is given.
    """
    name: str
    body: type
    target: Any = None

    def build(self, host: "Mapper", trait_names: Iterable[str]) -> "Mapper":
        if self.target is None:
            target = host.target
        else:
            target = resolve_target(self.name, self.target, host)
        logger.debug(f"Activating trait '{self.name}' on {host!r}")
        return self.body(target, *trait_names, owner=host, node_name=self.name, trait=True)

def trait(name: str, target: Any = None) -> Callable[[type], TraitDeclaration]:
    """
    Declare a nested Mapper subclass as a trait of the enclosing mapper:

        class CustomerAccountMapper(Mapper):
            brand = Map(format="enum")

            @trait("with_email")
            class WithEmail(Mapper):
                source = Map()
                email_address = Mount()
    """
    def decorator(body: type) -> TraitDeclaration:
        return TraitDeclaration(name, body, target)
    return decorator

def build_extension(host: "Mapper", body: type, trait_names: Iterable[str]) -> "Mapper":
    return TraitDeclaration(EXTENSION, body).build(host, trait_names)
