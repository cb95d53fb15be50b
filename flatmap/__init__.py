from .callbacks import (
    SaveOutcome,
    SaveState,
    ValidationState,
    after_save,
    after_validate,
    around_save,
    before_save,
    before_validate,
    callback,
    validator,
)
from .checks import conforms, presence
from .errors import (
    DeclarationError,
    DuplicateMappingNameError,
    Errors,
    FlatMapError,
    MissingTargetError,
    NoMappingError,
    TargetResolutionError,
)
from .formats import register_format
from .mapper import Mapper
from .mapping import Map, Mapping
from .mounting import Mount
from .targets import DictTarget, HttpResourceTarget, ModelTarget, ObjectTarget, Target, as_target
from .traits import trait

__all__ = [
    "Mapper",
    "Map",
    "Mapping",
    "Mount",
    "trait",
    "callback",
    "before_validate",
    "after_validate",
    "before_save",
    "around_save",
    "after_save",
    "validator",
    "presence",
    "conforms",
    "register_format",
    "Target",
    "ObjectTarget",
    "DictTarget",
    "ModelTarget",
    "HttpResourceTarget",
    "as_target",
    "Errors",
    "SaveOutcome",
    "SaveState",
    "ValidationState",
    "FlatMapError",
    "MissingTargetError",
    "TargetResolutionError",
    "DuplicateMappingNameError",
    "NoMappingError",
    "DeclarationError",
]
