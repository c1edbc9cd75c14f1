"""Tests for record declaration, description and payload building."""

import base64
from dataclasses import dataclass, field

import pytest

from validata.errors import NotARecordError, SchemaError
from validata.schema import (
    describe_record,
    display_name,
    record_from_dict,
    rule_field,
    snake_case,
)
from validata.types import Attachment, UInt, ValueKind


@dataclass
class Address:
    city: str = rule_field("city", "required|alpha", default="")
    zip_code: str = rule_field("zipCode", "numeric", default="")


@dataclass
class Profile:
    name: str = rule_field("name", "required", label="full name")
    age: int = rule_field("age", "email|required|min:18", default=0)
    score: UInt = rule_field("score", "uint", default=UInt(0))
    ratio: float = rule_field("ratio", "", default=0.0)
    active: bool = rule_field("active", "required", default=False)
    nickname: str | None = rule_field("nickname", "alpha", default=None)
    tags: list[str] = rule_field("tags", "alpha", default_factory=list)
    address: Address = rule_field("address", "", default_factory=Address)
    extra: dict[str, str] = rule_field("extra", "", default_factory=dict)
    avatar: Attachment | None = rule_field("avatar", "image", default=None)


@dataclass
class Untagged:
    name: str = field(default="")


@dataclass
class Unsupported:
    blob: bytes = rule_field("blob", "", default=b"")


@dataclass
class NestedLists:
    grid: list[list[int]] = rule_field("grid", "", default_factory=list)


# =============================================================================
# Names
# =============================================================================


class TestNames:
    @pytest.mark.parametrize(
        "wire,expected",
        [
            ("password_confirm", "password confirm"),
            ("passwordConfirm", "password confirm"),
            ("first-name", "first name"),
            ("email", "email"),
        ],
    )
    def test_display_name(self, wire, expected):
        assert display_name(wire) == expected

    def test_snake_case(self):
        assert snake_case("emailAddress") == "email_address"
        assert snake_case("email") == "email"


# =============================================================================
# describe_record
# =============================================================================


class TestDescribeRecord:
    def test_fields_in_declaration_order(self):
        schema = describe_record(Profile)
        assert [f.wire_name for f in schema.fields] == [
            "name", "age", "score", "ratio", "active", "nickname", "tags", "address", "extra", "avatar",
        ]

    def test_kinds(self):
        schema = describe_record(Profile)
        kinds = {f.wire_name: f.type for f in schema.fields}
        assert kinds["name"].kind == ValueKind.TEXT
        assert kinds["age"].kind == ValueKind.INT
        assert kinds["score"].kind == ValueKind.UINT
        assert kinds["ratio"].kind == ValueKind.FLOAT
        assert kinds["active"].kind == ValueKind.BOOL
        assert kinds["nickname"].kind == ValueKind.TEXT
        assert kinds["nickname"].optional
        assert kinds["tags"].kind == ValueKind.SEQUENCE
        assert kinds["tags"].element.kind == ValueKind.TEXT
        assert kinds["address"].kind == ValueKind.RECORD
        assert kinds["address"].record_type is Address
        assert kinds["extra"].kind == ValueKind.MAPPING
        assert kinds["avatar"].kind == ValueKind.ATTACHMENT

    def test_label_overrides_display_name(self):
        schema = describe_record(Profile)
        assert schema.field_by_wire_name("name").display_name == "full name"
        assert describe_record(Address).field_by_wire_name("zipCode").display_name == "zip code"

    def test_required_first(self):
        age = describe_record(Profile).field_by_wire_name("age")
        assert [d.name for d in age.rules] == ["required", "email", "min"]

    def test_schema_is_cached(self):
        assert describe_record(Profile) is describe_record(Profile)

    def test_not_a_dataclass(self):
        with pytest.raises(NotARecordError):
            describe_record(dict)

    def test_not_a_record_is_a_type_error(self):
        with pytest.raises(TypeError):
            describe_record(int)

    def test_missing_tags(self):
        with pytest.raises(SchemaError, match="Untagged.name: json or validate tag missing"):
            describe_record(Untagged)

    def test_unsupported_annotation(self):
        with pytest.raises(SchemaError, match="unsupported annotation"):
            describe_record(Unsupported)

    def test_nested_collections_rejected(self):
        with pytest.raises(SchemaError, match="nested collections"):
            describe_record(NestedLists)


# =============================================================================
# record_from_dict
# =============================================================================


class TestRecordFromDict:
    def test_builds_from_wire_names(self):
        record = record_from_dict(Address, {"city": "Accra", "zipCode": "00233"})
        assert record == Address(city="Accra", zip_code="00233")

    def test_missing_required_field_gets_zero_value(self):
        record = record_from_dict(Address, {})
        assert record.city == ""

    def test_type_mismatch_becomes_zero_value(self):
        record = record_from_dict(Profile, {"name": 42, "age": "old", "active": "yes"})
        assert record.name == ""
        assert record.age == 0
        assert record.active is False

    def test_nested_record_and_list(self):
        record = record_from_dict(
            Profile,
            {"name": "Ama", "tags": ["a", "b"], "address": {"city": "Kumasi"}},
        )
        assert record.tags == ["a", "b"]
        assert record.address == Address(city="Kumasi")

    def test_optional_keeps_none(self):
        record = record_from_dict(Profile, {"nickname": None})
        assert record.nickname is None

    def test_attachment_from_base64(self):
        content = base64.b64encode(b"\x89PNG\r\n\x1a\nrest").decode()
        record = record_from_dict(Profile, {"avatar": {"filename": "me.png", "content": content}})
        assert record.avatar == Attachment(filename="me.png", content=b"\x89PNG\r\n\x1a\nrest")

    def test_payload_must_be_a_mapping(self):
        with pytest.raises(NotARecordError):
            record_from_dict(Address, ["city"])
