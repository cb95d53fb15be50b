import logging
from collections.abc import MutableMapping
from functools import lru_cache
from typing import Any, Protocol, Self, runtime_checkable

import httpx
from pydantic import BaseModel, TypeAdapter

logger = logging.getLogger(__name__)

@runtime_checkable
class Target(Protocol):
    obj: Any

    def get(self, attr: str) -> Any:
        ...

    def set(self, attr: str, value: Any) -> None:
        ...

    def save(self) -> bool:
        ...

@lru_cache(maxsize=None)
def _field_adapter(model_class: type[BaseModel], attr: str) -> TypeAdapter | None:
    field = model_class.model_fields.get(attr)
    return TypeAdapter(field.annotation) if field is not None else None

def _call_save(obj: Any) -> bool:
    save = getattr(obj, "save", None)
    if not callable(save):
        return True
    result = save()
    return result is None or bool(result)

class ObjectTarget:
    """ Plain object, read and written through its attributes """
    def __init__(self, obj: Any):
        self.obj = obj

    def get(self, attr: str) -> Any:
        return getattr(self.obj, attr, None)

    def set(self, attr: str, value: Any) -> None:
        setattr(self.obj, attr, value)

    def save(self) -> bool:
        return _call_save(self.obj)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({type(self.obj).__name__})"

class DictTarget(ObjectTarget):
    def get(self, attr: str) -> Any:
        return self.obj.get(attr)

    def set(self, attr: str, value: Any) -> None:
        self.obj[attr] = value

    def save(self) -> bool:
        return True

class ModelTarget(ObjectTarget):
    """
    pydantic model target. Values written to declared fields are coerced
    with the field's annotation unless the model validates assignment itself.
    """
    obj: BaseModel

    def set(self, attr: str, value: Any) -> None:
        model_class = type(self.obj)
        if not model_class.model_config.get("validate_assignment"):
            adapter = _field_adapter(model_class, attr)
            if adapter is not None:
                value = adapter.validate_python(value)
        setattr(self.obj, attr, value)

class HttpResourceTarget:
    """
    JSON resource behind a REST collection, e.g. ``/v1/customers``.
    The resource is kept locally as a dict; ``save`` PUTs it back to
    ``{path}/{id}``, or POSTs it to ``path`` when it has no id yet.
    """
    def __init__(self, client: httpx.Client, path: str, data: dict[str, Any] | None = None, id_field: str = "id"):
        self.client = client
        self.path = path.rstrip("/")
        self.id_field = id_field
        self.obj: dict[str, Any] = dict(data or {})

    @property
    def resource_id(self) -> Any:
        return self.obj.get(self.id_field)

    def load(self, resource_id: Any = None) -> Self:
        if resource_id is not None:
            self.obj[self.id_field] = resource_id
        response = self.client.get(f"{self.path}/{self.resource_id}")
        response.raise_for_status()
        self.obj = response.json()
        return self

    def get(self, attr: str) -> Any:
        return self.obj.get(attr)

    def set(self, attr: str, value: Any) -> None:
        self.obj[attr] = value

    def save(self) -> bool:
        try:
            if self.resource_id is None:
                response = self.client.post(self.path, json=self.obj)
            else:
                response = self.client.put(f"{self.path}/{self.resource_id}", json=self.obj)
        except httpx.HTTPError as e:
            logger.error(f"Cannot save resource to {self.path}: {e}")
            return False
        if not response.is_success:
            logger.error(f"Saving resource to {self.path} failed with status {response.status_code}")
            return False
        try:
            body = response.json() if response.content else None
        except ValueError:
            logger.debug(f"Resource at {self.path} saved with a non-JSON response")
            body = None
        if isinstance(body, dict):
            self.obj.update(body)
        return True

    def __repr__(self) -> str:
        return f"HttpResourceTarget({self.path}/{self.resource_id})"

def as_target(obj: Any) -> Target:
    if isinstance(obj, Target):
        return obj
    if isinstance(obj, BaseModel):
        return ModelTarget(obj)
    if isinstance(obj, MutableMapping):
        return DictTarget(obj)
    return ObjectTarget(obj)
