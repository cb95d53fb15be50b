import logging
from typing import Any, Callable

from .callbacks import ValidationState

logger = logging.getLogger(__name__)

class Skipping:
    """
    Exclude a mapper from processing after it has been built. A skipped
    mapper reports itself valid and saved without running anything, and is
    left out of reading, writing and its host's callback chain together with
    everything beneath it. Writing to a mapper puts it back in use.
    """

    _skip_flag: bool = False

    def skip(self) -> None:
        self._skip_flag = True
        logger.debug(f"Skipping {self!r}")
        self._notify_target("on_skip")

    def unskip(self) -> None:
        if not self._skip_flag:
            return
        self._skip_flag = False
        logger.debug(f"Using {self!r} again")
        self._notify_target("on_unskip")

    def use(self) -> None:
        self.unskip()

    @property
    def skipped(self) -> bool:
        return self._skip_flag

    def _notify_target(self, reaction: str) -> None:
        # persistence reactions (reload, discard) belong to the target adapter
        handler = getattr(self.target, reaction, None)
        if callable(handler):
            handler()

    def valid(self, context: Any = None) -> bool:
        if self.skipped:
            self.errors.clear()
            self.validation_state = ValidationState.VALID
            return True
        return super().valid(context)

    def save(self) -> bool:
        return self.skipped or super().save()

    def shallow_save(self, fallback: Callable[[], bool] | None = None) -> bool:
        if self.skipped:
            return fallback() if fallback is not None else True
        return super().shallow_save(fallback)
