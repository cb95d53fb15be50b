from typing import Any, Iterator

class FlatMapError(Exception):
    pass

class MissingTargetError(FlatMapError, ValueError):
    def __init__(self, mapper_class: type):
        super().__init__(f"Target object is required to initialize mapper {mapper_class.__name__}")

class TargetResolutionError(FlatMapError):
    def __init__(self, name: str, host: Any):
        super().__init__(f"Mounting '{name}' of {host!r} resolved to no target")

class DuplicateMappingNameError(FlatMapError):
    def __init__(self, name: str, mapper: Any):
        super().__init__(f"Name '{name}' is defined more than once in {mapper!r}")

class NoMappingError(FlatMapError, AttributeError):
    def __init__(self, name: str, mapper: Any):
        super().__init__(f"{mapper!r} has no attribute or mapping '{name}'")
        self.name = name

class DeclarationError(FlatMapError, TypeError):
    pass

class Errors:
    """ Validation failures, keyed by flat mapping name """

    def __init__(self):
        self._messages: dict[str, list[str]] = {}

    def add(self, name: str, message: str) -> None:
        self._messages.setdefault(name, []).append(message)

    def merge(self, other: "Errors") -> None:
        for name, messages in other.items():
            for message in messages:
                if message not in self[name]:
                    self.add(name, message)

    def clear(self) -> None:
        self._messages.clear()

    def items(self):
        return self._messages.items()

    def to_dict(self) -> dict[str, list[str]]:
        return {name: list(messages) for name, messages in self._messages.items()}

    def full_messages(self) -> list[str]:
        return [f"{name} {message}" for name, messages in self._messages.items() for message in messages]

    def __getitem__(self, name: str) -> list[str]:
        return self._messages.get(name, [])

    def __contains__(self, name: object) -> bool:
        return bool(self._messages.get(name))

    def __iter__(self) -> Iterator[str]:
        return iter(self._messages)

    def __len__(self) -> int:
        return sum(len(messages) for messages in self._messages.values())

    def __bool__(self) -> bool:
        return len(self) > 0

    def __repr__(self) -> str:
        return f"Errors({self._messages!r})"
