import logging
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import TYPE_CHECKING, Any, Callable, Iterator

from .errors import DeclarationError

if TYPE_CHECKING:
    from .mapper import Mapper

logger = logging.getLogger(__name__)

PHASE_TIMINGS: dict[str, tuple[str, ...]] = {
    "validate": ("before", "after"),
    "save": ("before", "around", "after"),
}

CALLBACKS_ATTR = "__flatmap_callbacks__"
VALIDATOR_ATTR = "__flatmap_validator__"

class ValidationState(Enum):
    UNINITIALIZED = "uninitialized"
    VALIDATING = "validating"
    VALID = "valid"
    INVALID = "invalid"

class SaveState(Enum):
    NOT_SAVED = "not-saved"
    SAVING = "saving"
    SAVED = "saved"
    SAVE_FAILED = "save-failed"

@dataclass(frozen=True)
class SaveOutcome:
    path: str
    saved: bool

def check_callback(phase: str, timing: str) -> None:
    if timing not in PHASE_TIMINGS.get(phase, ()):
        raise DeclarationError(f"Unsupported callback {timing} {phase}")

def callback(phase: str, timing: str) -> Callable[[Callable], Callable]:
    """ Mark a mapper method as a lifecycle hook, e.g. ``@callback("save", "before")`` """
    check_callback(phase, timing)

    def decorator(fn: Callable) -> Callable:
        hooks = getattr(fn, CALLBACKS_ATTR, [])
        setattr(fn, CALLBACKS_ATTR, [*hooks, (phase, timing)])
        return fn
    return decorator

before_validate = callback("validate", "before")
after_validate = callback("validate", "after")
before_save = callback("save", "before")
around_save = callback("save", "around")
after_save = callback("save", "after")

def validator(fn: Callable) -> Callable:
    """ Mark a mapper method as a validation check; it records failures in ``self.errors`` """
    setattr(fn, VALIDATOR_ATTR, True)
    return fn

class Callbacks:
    """
    Validation and save orchestration over a mapper tree.

    A mapper and its active traits form one callback group: they share a
    target, and their hooks are merged around a single core action. For a
    phase run, the before-hooks of the group run in pre-order, then the core
    (wrapped by around-hooks), then the after-hooks in post-order. Mounted
    mappers of the group run their own phase as part of the core, so their
    hooks nest inside the host's.
    """

    _validation_context: Any = None

    def callback_group(self) -> Iterator["Mapper"]:
        yield self
        for child in self.trait_children:
            if not child.skipped:
                yield from child.callback_group()

    def _callback_group_post_order(self) -> Iterator["Mapper"]:
        for child in self.trait_children:
            if not child.skipped:
                yield from child._callback_group_post_order()
        yield self

    def group_mountings(self) -> Iterator["Mapper"]:
        for node in self.callback_group():
            for mounted in node.mountings:
                if not mounted.skipped:
                    yield mounted

    def _bound_hooks(self, phase: str, timing: str) -> list[Callable]:
        bound = []
        for hook in type(self)._callbacks.get((phase, timing), ()):
            if isinstance(hook, str):
                bound.append(getattr(self, hook))
            else:
                bound.append(partial(hook, self))
        return bound

    def run_callbacks(self, phase: str, core: Callable[[], Any]) -> bool:
        group = list(self.callback_group())
        succeeded = True

        for node in group:
            for hook in node._bound_hooks(phase, "before"):
                if hook() is False:
                    succeeded = False

        proceed = core
        for node in reversed(group):
            for hook in reversed(node._bound_hooks(phase, "around")):
                proceed = partial(hook, proceed)
        if not proceed():
            succeeded = False

        for node in self._callback_group_post_order():
            for hook in node._bound_hooks(phase, "after"):
                if hook() is False:
                    succeeded = False

        return succeeded

    @property
    def validation_context(self) -> Any:
        if self.is_trait:
            return self.owner.validation_context
        return self._validation_context

    def valid(self, context: Any = None) -> bool:
        self.errors.clear()
        self._validation_context = context
        self.validation_state = ValidationState.VALIDATING
        valid = False
        try:
            valid = self.run_callbacks("validate", self._validate_core) and not self.errors
        finally:
            self._validation_context = None
            self.validation_state = ValidationState.VALID if valid else ValidationState.INVALID
        return valid

    def _validate_core(self) -> bool:
        for node in self.callback_group():
            for check in node._bound_checks():
                check()
        mountings_valid = True
        for mounted in self.group_mountings():
            if not mounted.valid(self.validation_context):
                mountings_valid = False
            self.errors.merge(mounted.errors)
        return mountings_valid

    def _bound_checks(self) -> list[Callable[[], Any]]:
        return [getattr(self, check) if isinstance(check, str) else partial(check, self)
                for check in type(self)._validations]

    def save(self) -> bool:
        return self._run_save(self._save_tree)

    def shallow_save(self, fallback: Callable[[], bool] | None = None) -> bool:
        return self._run_save(self._save_group_targets)

    def _run_save(self, core: Callable[[], bool]) -> bool:
        self.save_state = SaveState.SAVING
        self.save_outcomes = []
        saved = False
        try:
            saved = self.run_callbacks("save", core)
        finally:
            self.save_state = SaveState.SAVED if saved else SaveState.SAVE_FAILED
        if not saved:
            logger.warning(f"Saving {self!r} failed: {[o.path for o in self.save_outcomes if not o.saved]}")
        return saved

    def _save_target_of(self, node: "Mapper") -> bool:
        try:
            saved = bool(node.target.save())
        except Exception:
            logger.exception(f"Saving the target of {node!r} raised")
            saved = False
        self.save_outcomes.append(SaveOutcome(node.path, saved))
        return saved

    def _save_group_targets(self) -> bool:
        # traits share the host target unless declared with their own
        results = []
        saved_targets = []
        for node in self.callback_group():
            if any(node.target is target for target in saved_targets):
                continue
            saved_targets.append(node.target)
            results.append(self._save_target_of(node))
        return all(results)

    def _save_tree(self) -> bool:
        # every save runs even after a failure; the result is the conjunction
        results = [self._save_group_targets()]
        for mounted in self.group_mountings():
            try:
                results.append(mounted.save())
            except Exception:
                logger.exception(f"Saving {mounted!r} raised")
                results.append(False)
                mounted.save_outcomes.append(SaveOutcome(mounted.path, False))
            self.save_outcomes.extend(mounted.save_outcomes)
        return all(results)
