import logging
from collections.abc import Mapping as MappingABC
from typing import TYPE_CHECKING, Any, Iterable, Iterator, Optional

from .errors import DeclarationError, DuplicateMappingNameError, NoMappingError

if TYPE_CHECKING:
    from .mapping import Mapping

logger = logging.getLogger(__name__)

class AccessorTable(MappingABC):
    """ Flat name -> mapping table of a mapper; reads and writes go through the mapping """

    def __init__(self, owner: Any, mappings: Iterable["Mapping"]):
        self._mappings: dict[str, "Mapping"] = {}
        for mapping in mappings:
            if mapping.flat_name in self._mappings:
                raise DuplicateMappingNameError(mapping.flat_name, owner)
            if hasattr(type(owner), mapping.flat_name) or mapping.flat_name in vars(owner):
                raise DeclarationError(f"Flat name '{mapping.flat_name}' would shadow an attribute of {owner!r}")
            self._mappings[mapping.flat_name] = mapping

    def mapping(self, name: str) -> "Mapping":
        return self._mappings[name]

    def __getitem__(self, name: str) -> Any:
        return self._mappings[name].read_formatted()

    def __setitem__(self, name: str, value: Any) -> None:
        self._mappings[name].write(value)

    def __contains__(self, name: object) -> bool:
        return name in self._mappings

    def __iter__(self) -> Iterator[str]:
        return iter(self._mappings)

    def __len__(self) -> int:
        return len(self._mappings)

class AttributeMethods:
    """
    Expose every mapping reachable from a mapper as a plain attribute:

        mapper.read()["first_name"]  # => "John"
        mapper.first_name            # => "John"
        mapper.last_name = "Smith"

    Trait mappers fall back to their owner for anything they cannot resolve
    themselves, so trait code can use the host's mappings and methods.
    """

    def _install_accessors(self) -> None:
        self.__dict__["_accessors"] = AccessorTable(self, self.effective_mappings())
        logger.debug(f"Installed {len(self._accessors)} accessors on {self!r}")

    @property
    def accessors(self) -> AccessorTable:
        return self._accessors

    @property
    def dispatch_installed(self) -> bool:
        return "_accessors" in self.__dict__

    def _accessor_table_for(self, name: str) -> Optional[AccessorTable]:
        node = self
        while node is not None:
            accessors = node.__dict__.get("_accessors")
            if accessors is not None and name in accessors:
                return accessors
            node = node.__dict__.get("owner") if node.__dict__.get("is_trait") else None
        return None

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        accessors = self.__dict__.get("_accessors")
        if accessors is not None and name in accessors:
            return accessors[name]
        if self.__dict__.get("is_trait"):
            return getattr(self.__dict__["owner"], name)
        raise NoMappingError(name, self)

    def __setattr__(self, name: str, value: Any) -> None:
        if not name.startswith("_") and name not in self.__dict__ and not hasattr(type(self), name):
            accessors = self._accessor_table_for(name)
            if accessors is not None:
                accessors[name] = value
                return
        object.__setattr__(self, name, value)
