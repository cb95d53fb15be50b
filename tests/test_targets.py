"""Tests for target adapters."""

import json
from typing import Optional

import httpx
import pytest
from pydantic import BaseModel, ValidationError

from conftest import Record
from flatmap import DictTarget, HttpResourceTarget, Map, Mapper, ModelTarget, Mount, ObjectTarget, as_target
from flatmap.targets import _field_adapter


class Customer(BaseModel):
    first_name: str
    age: Optional[int] = None


class Account(BaseModel):
    brand: str
    customer: Customer


class CustomerModelMapper(Mapper):
    first_name = Map()
    age = Map()


class AccountModelMapper(Mapper):
    brand = Map()
    customer = Mount(mapper_class=CustomerModelMapper)


class TestAsTarget:
    """Test adapter selection."""

    def test_selects_adapter_by_type(self):
        """Models, dicts and plain objects each get their adapter."""
        assert isinstance(as_target(Customer(first_name="J")), ModelTarget)
        assert isinstance(as_target({}), DictTarget)
        assert isinstance(as_target(Record()), ObjectTarget)

    def test_existing_target_passes_through(self):
        """Adapters are not wrapped twice."""
        target = DictTarget({})

        assert as_target(target) is target


class TestObjectTarget:
    """Test the plain object adapter."""

    def test_save_uses_object_save(self):
        """The object's own save decides the result."""
        assert ObjectTarget(Record(save_result=False)).save() is False
        assert ObjectTarget(Record()).save() is True

    def test_save_without_save_method(self):
        """Objects without save count as saved."""
        class Plain:
            pass

        assert ObjectTarget(Plain()).save() is True

    def test_none_from_save_is_success(self):
        """Save methods returning nothing succeed."""
        class NoneSaver:
            def save(self):
                return None

        assert ObjectTarget(NoneSaver()).save() is True


class TestModelTarget:
    """Test pydantic model targets."""

    def test_read_and_write_nested_models(self):
        """Mounted models are reached through the parent's field."""
        account = Account(brand="tlp", customer=Customer(first_name="John"))
        mapper = AccountModelMapper(account)

        assert mapper.read() == {"brand": "tlp", "first_name": "John", "age": None}

        mapper.write({"first_name": "Jane", "age": "42"})

        assert account.customer.first_name == "Jane"
        assert account.customer.age == 42

    def test_invalid_values_raise(self):
        """Values that do not fit the field annotation are rejected."""
        mapper = CustomerModelMapper(Customer(first_name="John"))

        with pytest.raises(ValidationError):
            mapper.write({"age": "old"})

    def test_field_adapter_is_reused(self):
        """Coercion adapters are built once per model field."""
        first = _field_adapter(Customer, "age")

        CustomerModelMapper(Customer(first_name="John")).write({"age": "7"})

        assert _field_adapter(Customer, "age") is first
        assert _field_adapter(Customer, "nickname") is None


def _resource_handler(store: dict, requests: list):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append((request.method, request.url.path))
        if request.method == "GET":
            return httpx.Response(200, json=store[request.url.path])
        body = json.loads(request.content)
        if request.method == "POST":
            body["id"] = 7
            store[f"{request.url.path}/7"] = body
            return httpx.Response(201, json=body)
        if body.get("email") == "bad":
            return httpx.Response(422, json={"detail": "invalid email"})
        store[request.url.path] = body
        return httpx.Response(200, json=body)
    return handler


class TestHttpResourceTarget:
    """Test REST resources as targets."""

    @pytest.fixture
    def store(self) -> dict:
        return {"/v1/customers/1": {"id": 1, "first_name": "John", "email": "j@x.com"}}

    @pytest.fixture
    def requests(self) -> list:
        return []

    @pytest.fixture
    def client(self, store, requests) -> httpx.Client:
        return httpx.Client(base_url="http://api.test", transport=httpx.MockTransport(_resource_handler(store, requests)))

    def test_load_read_write_save(self, client, store, requests):
        """A loaded resource is read, written and PUT back."""
        class CustomerResourceMapper(Mapper):
            first_name = Map()
            email = Map()

        target = HttpResourceTarget(client, "/v1/customers").load(1)
        mapper = CustomerResourceMapper(target)

        assert mapper.read() == {"first_name": "John", "email": "j@x.com"}

        mapper.write({"first_name": "Jane"})

        assert mapper.save()
        assert store["/v1/customers/1"]["first_name"] == "Jane"
        assert requests == [("GET", "/v1/customers/1"), ("PUT", "/v1/customers/1")]

    def test_new_resource_is_posted(self, client, store):
        """Resources without an id are created on the collection."""
        target = HttpResourceTarget(client, "/v1/customers/", {"first_name": "New"})

        assert target.save()
        assert target.resource_id == 7
        assert store["/v1/customers/7"]["first_name"] == "New"

    def test_failed_save_returns_false(self, client):
        """Error responses fail the save instead of raising."""
        target = HttpResourceTarget(client, "/v1/customers").load(1)
        target.set("email", "bad")

        assert target.save() is False

    def test_transport_error_returns_false(self):
        """Unreachable services fail the save."""
        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.Client(base_url="http://api.test", transport=httpx.MockTransport(unreachable))
        target = HttpResourceTarget(client, "/v1/customers", {"id": 1})

        assert target.save() is False

    def test_non_json_success_body(self):
        """A successful save with a plain-text body still counts as saved."""
        client = httpx.Client(
            base_url="http://api.test",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="OK")),
        )
        target = HttpResourceTarget(client, "/v1/customers", {"id": 1, "first_name": "John"})

        assert target.save() is True
        assert target.obj == {"id": 1, "first_name": "John"}
