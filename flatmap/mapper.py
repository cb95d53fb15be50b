"""
Mappers project a tree of backing objects onto one flat dict, and distribute
a flat dict of the same shape back over that tree.

Mappings bind a flat name to an attribute of the mapper's target:

    class CustomerMapper(Mapper):
        first_name = last_name = Map()
        dob = Map("date_of_birth", format="date", multiparam=date)

Mountings attach another mapper, with its own target, under a host. By
default the target is the host target's attribute of the same name, and the
mapper class is looked up from the name (``email_address`` ->
``EmailAddressMapper``):

    class CustomerAccountMapper(Mapper):
        brand = Map(format="enum")
        customer = Mount(traits=["with_phone"])
        phone = Mount(target=lambda account: account.phones[1], suffix="_2")

Traits are named sets of declarations, built on top of the host only when the
host is initialized with the trait's name. Extensions are anonymous traits
passed at initialization:

    class CustomerAccountMapper(Mapper):
        @trait("with_email")
        class WithEmail(Mapper):
            source = Map()
            email_address = Mount()

    mapper = CustomerAccountMapper(account, "with_email", extension=AuditMapper)
    mapper.read()      # => {"brand": ..., "source": ..., "email": ...}
    mapper.write(params)
    mapper.valid() and mapper.save()
"""
import logging
from typing import Any, Callable, Iterator, Optional

from .attribute_methods import AttributeMethods
from .callbacks import CALLBACKS_ATTR, VALIDATOR_ATTR, Callbacks, SaveOutcome, SaveState, ValidationState, check_callback
from .errors import DeclarationError, DuplicateMappingNameError, Errors, MissingTargetError, NoMappingError
from .mapping import Map, Mapping, MappingDefinition, MappingOptions, parse_options
from .mounting import Mount, MountingDefinition, MountingOptions, find_mounting, register_mapper_class
from .skipping import Skipping
from .targets import Target, as_target
from .traits import TraitDeclaration, build_extension

logger = logging.getLogger(__name__)

MAPPING_OPTIONS = set(MappingOptions.model_fields)

# set on every node in __init__; mappings cannot take these names
NODE_ATTRIBUTES = frozenset({
    "target", "owner", "is_trait", "node_name", "trait_names", "suffix", "host", "errors",
    "validation_state", "save_state", "save_outcomes", "mappings", "mountings", "trait_children",
})

class Mapper(Skipping, Callbacks, AttributeMethods):
    _mapping_definitions: list[MappingDefinition] = []
    _mounting_definitions: list[MountingDefinition] = []
    _trait_definitions: dict[str, TraitDeclaration] = {}
    _callbacks: dict[tuple[str, str], list[str | Callable]] = {}
    _validations: list[str | Callable] = []

    def __init_subclass__(cls, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        # subclasses extend copies of their parent's declarations
        cls._mapping_definitions = list(cls._mapping_definitions)
        cls._mounting_definitions = list(cls._mounting_definitions)
        cls._trait_definitions = dict(cls._trait_definitions)
        cls._callbacks = {key: list(hooks) for key, hooks in cls._callbacks.items()}
        cls._validations = list(cls._validations)

        for name, value in list(vars(cls).items()):
            if isinstance(value, Map):
                cls._add_mapping(value.definition(name))
                delattr(cls, name)
            elif isinstance(value, Mount):
                cls._add_mounting(value.definition(name))
                delattr(cls, name)
            elif isinstance(value, TraitDeclaration):
                cls.declare_trait(value.name, value.body, value.target)
                delattr(cls, name)
            elif name == "validations" and isinstance(value, (list, tuple)):
                for check in value:
                    cls.declare_validation(check)
                delattr(cls, name)
            elif callable(value):
                for phase, timing in getattr(value, CALLBACKS_ATTR, ()):
                    cls.declare_callback(phase, timing, name)
                if getattr(value, VALIDATOR_ATTR, False):
                    cls.declare_validation(name)

        register_mapper_class(cls)

    ### DECLARATIONS

    @classmethod
    def declare_mapping(cls, *names: str, **options: Any) -> None:
        """
        ``declare_mapping("first_name", "last_name", dob="date_of_birth", format="date")``
        maps every name (and every ``name=attribute`` pair) with the shared options.
        """
        mapping_options = {key: options.pop(key) for key in list(options) if key in MAPPING_OPTIONS}
        parsed = parse_options(MappingOptions, mapping_options)
        for name in names:
            cls._add_mapping(MappingDefinition(name, name, parsed))
        for name, target_attribute in options.items():
            if not isinstance(target_attribute, str):
                raise DeclarationError(f"Mapping '{name}' must name a target attribute, got {target_attribute!r}")
            cls._add_mapping(MappingDefinition(name, target_attribute, parsed))

    @classmethod
    def declare_mounting(cls, name: str, **options: Any) -> None:
        cls._add_mounting(MountingDefinition(name, parse_options(MountingOptions, options)))

    @classmethod
    def declare_trait(cls, name: str, body: type, target: Any = None) -> None:
        if not (isinstance(body, type) and issubclass(body, Mapper)):
            raise DeclarationError(f"Trait '{name}' of {cls.__name__} must be a Mapper subclass")
        cls._trait_definitions[name] = TraitDeclaration(name, body, target)

    @classmethod
    def declare_callback(cls, phase: str, timing: str, hook: str | Callable) -> None:
        check_callback(phase, timing)
        hooks = cls._callbacks.setdefault((phase, timing), [])
        if hook not in hooks:
            hooks.append(hook)

    @classmethod
    def declare_validation(cls, check: str | Callable) -> None:
        if check not in cls._validations:
            cls._validations.append(check)

    @classmethod
    def _add_mapping(cls, definition: MappingDefinition) -> None:
        if definition.name.startswith("_") or definition.name in NODE_ATTRIBUTES or hasattr(Mapper, definition.name):
            raise DeclarationError(f"Mapping '{definition.name}' of {cls.__name__} would shadow a mapper attribute")
        cls._mapping_definitions = [d for d in cls._mapping_definitions if d.name != definition.name]
        cls._mapping_definitions.append(definition)

    @classmethod
    def _add_mounting(cls, definition: MountingDefinition) -> None:
        cls._mounting_definitions = [d for d in cls._mounting_definitions if d.name != definition.name]
        cls._mounting_definitions.append(definition)

    ### CONSTRUCTION

    def __init__(self,
                 target: Any,
                 *trait_names: str,
                 extension: type | None = None,
                 owner: Optional["Mapper"] = None,
                 node_name: str | None = None,
                 suffix: str | None = None,
                 trait: bool = False):
        if target is None:
            raise MissingTargetError(type(self))

        self.target: Target = as_target(target)
        self.owner = owner
        self.is_trait = trait
        self.node_name = node_name or type(self).__name__
        self.trait_names = tuple(dict.fromkeys(trait_names))
        # resolved once: the nearest own suffix up the owner chain
        if suffix is None and owner is not None:
            suffix = owner.suffix
        self.suffix = suffix
        if trait:
            self.host = owner.host
        else:
            # mounted from within a trait: the host is the trait's owner
            host = owner
            while host is not None and host.is_trait:
                host = host.owner
            self.host = host

        self.errors = owner.errors if trait else Errors()
        self.validation_state = ValidationState.UNINITIALIZED
        self.save_state = SaveState.NOT_SAVED
        self.save_outcomes: list[SaveOutcome] = []

        self.mappings = [Mapping(self, definition) for definition in self._mapping_definitions]
        self.mountings: list[Mapper] = [definition.mount(self) for definition in self._mounting_definitions]
        self.trait_children: list[Mapper] = [
            self._trait_definitions[name].build(self, self.trait_names)
            for name in self.trait_names
            if name in self._trait_definitions
        ]
        if extension is not None:
            self.trait_children.append(build_extension(self, extension, self.trait_names))

        self._check_mounting_names()
        self._install_accessors()

    def _check_mounting_names(self) -> None:
        seen = set()
        for node in self.callback_group():
            for mounted in node.mountings:
                if mounted.full_name in seen:
                    raise DuplicateMappingNameError(mounted.full_name, self)
                seen.add(mounted.full_name)

    def __repr__(self) -> str:
        node_name = self.__dict__.get("node_name", "")
        suffix = self.__dict__.get("suffix")
        suffix = f" suffix={suffix!r}" if suffix else ""
        return f"<{type(self).__name__} {node_name}{suffix}>"

    ### TREE

    @property
    def full_name(self) -> str:
        return f"{self.node_name}{self.suffix or ''}"

    @property
    def path(self) -> str:
        if self.owner is None:
            return self.full_name
        return f"{self.owner.path}.{self.full_name}"

    @property
    def owned(self) -> bool:
        return self.is_trait

    @property
    def hosted(self) -> bool:
        return self.host is not None

    @property
    def suffixed(self) -> bool:
        return bool(self.suffix)

    @property
    def extension(self) -> Optional["Mapper"]:
        for child in self.trait_children:
            if child.node_name == "extension":
                return child
        return None

    @property
    def children(self) -> list["Mapper"]:
        return [*self.trait_children, *self.mountings]

    def trait(self, name: str) -> Optional["Mapper"]:
        for child in self.trait_children:
            if child.node_name == name:
                return child
            nested = child.trait(name)
            if nested is not None:
                return nested
        return None

    def mounting(self, name: str) -> Optional["Mapper"]:
        for node in self._all_group_nodes():
            mounted = find_mounting(node.mountings, name)
            if mounted is not None:
                return mounted
        return None

    def all_nested_mountings(self) -> list["Mapper"]:
        nested = []
        for node in self._all_group_nodes():
            for mounted in node.mountings:
                nested.append(mounted)
                nested.extend(mounted.all_nested_mountings())
        return nested

    def _all_group_nodes(self) -> Iterator["Mapper"]:
        # like callback_group, skipped traits included
        yield self
        for child in self.trait_children:
            yield from child._all_group_nodes()

    def mapping(self, name: str) -> Mapping:
        """ Mapping declared as ``name`` on this mapper, or on its owners for traits """
        for mapping in self.mappings:
            if mapping.name == name:
                return mapping
        if self.is_trait:
            return self.owner.mapping(name)
        raise NoMappingError(name, self)

    def effective_mappings(self, include_skipped: bool = True) -> Iterator[Mapping]:
        """ Own mappings, then those of traits, the extension and mounted mappers, recursively """
        if self.skipped and not include_skipped:
            return
        yield from self.mappings
        for child in self.children:
            yield from child.effective_mappings(include_skipped)

    ### READ / WRITE

    def read(self) -> dict[str, Any]:
        return {
            mapping.flat_name: mapping.read_formatted()
            for mapping in self.effective_mappings(include_skipped=False)
            if mapping.readable
        }

    def write(self, params: dict[str, Any] | None = None, **values: Any) -> None:
        # any write puts the mapper back in use
        self.unskip()
        params = {**(params or {}), **values}
        for mapping in self.effective_mappings(include_skipped=False):
            if mapping.writable:
                mapping.write_from_params(params)
