"""
Shared fixtures for flatmap tests.

``Record`` stands in for a persisted domain object: any attribute can be
set on it, and ``save`` records the call and returns a configurable result.
"""

from types import SimpleNamespace

import pytest

from flatmap import Map, Mapper, Mount, trait


class Record(SimpleNamespace):
    def __init__(self, save_result: bool = True, **attributes):
        super().__init__(**attributes)
        self.save_result = save_result
        self.save_calls = 0

    def save(self) -> bool:
        self.save_calls += 1
        return self.save_result


class ContactEmailMapper(Mapper):
    email = Map()


class ContactPhoneMapper(Mapper):
    phone = Map("number")


class ContactMapper(Mapper):
    first_name = Map()
    phone = Map()

    @trait("with_email")
    class WithEmail(Mapper):
        source = Map()
        email_address = Mount(mapper_class=ContactEmailMapper)

    work_phone = Mount(
        mapper_class=ContactPhoneMapper,
        target=lambda contact: contact.phones[1],
        suffix="_2",
    )


@pytest.fixture
def contact() -> Record:
    return Record(
        first_name="John",
        phone="111",
        source=None,
        email_address=Record(email="j@x.com"),
        phones=[Record(number="000"), Record(number="222")],
    )


@pytest.fixture
def contact_mapper(contact: Record) -> ContactMapper:
    return ContactMapper(contact, "with_email")
