"""Unit tests for ObjectCodec: nested objects, elements, maps and enums."""

from __future__ import annotations

from collections import OrderedDict, defaultdict
from enum import Enum
from typing import Annotated

import pytest
from bson import ObjectId

from doc_mapper.core.config import MapperConfig
from doc_mapper.core.enums import FieldType
from doc_mapper.core.exceptions import (
    AccessError,
    MetadataError,
    MissingRequiredFieldError,
    NestingTooDeepError,
    UnsupportedShapeError,
)
from doc_mapper.core.mapper import DocumentMapper
from doc_mapper.mapping.element import Element
from doc_mapper.mapping.fields import (
    NumberField,
    ObjectField,
    ObjectIdField,
    StringField,
)
from doc_mapper.mapping.metadata import builder


class Location:
    city: Annotated[str, StringField("city", required=True)]
    zip_code: Annotated[str | None, StringField("zip")]

    @builder
    def __init__(self, city: str, zip_code: str | None = None) -> None:
        self.city = city
        self.zip_code = zip_code


class Person:
    name: Annotated[str, StringField("name", required=True)]
    home: Annotated[Location | None, ObjectField("home")]

    @builder
    def __init__(self, name: str, home: Location | None = None) -> None:
        self.name = name
        self.home = home


class Ship(Element):
    name: Annotated[str, StringField("name")]

    @builder
    def __init__(self, name: str) -> None:
        self.name = name


class Fleet:
    flagship: Annotated[Ship | None, ObjectField("flagship")]
    escort: Annotated[Ship | None, ObjectIdField("escort")]

    @builder
    def __init__(self, flagship: Ship | None, escort: Ship | None) -> None:
        self.flagship = flagship
        self.escort = escort


class Scoreboard:
    scores: Annotated[dict[int, float], ObjectField("scores")]

    @builder
    def __init__(self, scores: dict[int, float]) -> None:
        self.scores = scores


class Tally:
    counts: Annotated[defaultdict[str, int], ObjectField("counts")]

    @builder
    def __init__(self, counts: defaultdict[str, int]) -> None:
        self.counts = counts


class Ledger:
    entries: Annotated[OrderedDict[str, float], ObjectField("entries")]

    @builder
    def __init__(self, entries: OrderedDict[str, float]) -> None:
        self.entries = entries


class Grid:
    cells: Annotated[dict[str, dict[str, int]], ObjectField("cells")]

    @builder
    def __init__(self, cells: dict[str, dict[str, int]]) -> None:
        self.cells = cells


class Planet(Enum):
    MERCURY = (3.303e23, 2.4397e6)
    EARTH = (5.976e24, 6.37814e6)

    mass: Annotated[float, NumberField("mass", required=True)]
    radius: Annotated[float, NumberField("radius")]

    def __init__(self, mass: float, radius: float) -> None:
        self.mass = mass
        self.radius = radius


class Color(Enum):
    RED = 1
    BLUE = 2


class Node:
    label: Annotated[str, StringField("label")]
    child: Annotated[Node | None, ObjectField("child")]

    @builder
    def __init__(self, label: str, child: Node | None = None) -> None:
        self.label = label
        self.child = child


class Lazy:
    name: Annotated[str, StringField("name")]

    @builder
    def __init__(self, name: str) -> None:
        pass


class Badge:
    code: Annotated[str, StringField("code")]
    holder: Annotated[str, StringField("holder")]

    @builder
    def __init__(self, code: str) -> None:
        self.code = code

    @property
    def holder(self) -> str:
        return "nobody"


class TestNestedObjects:
    def test_encode(self, mapper: DocumentMapper) -> None:
        person = Person("ann", Location("Oslo", "0150"))
        assert mapper.to_document(person) == {
            "name": "ann",
            "home": {"city": "Oslo", "zip": "0150"},
        }

    def test_none_nested_object(self, mapper: DocumentMapper) -> None:
        assert mapper.to_document(Person("bob")) == {"name": "bob", "home": None}

    def test_decode(self, mapper: DocumentMapper) -> None:
        person = mapper.from_document(
            {"name": "ann", "home": {"city": "Oslo", "zip": "0150"}}, Person
        )
        assert isinstance(person.home, Location)
        assert (person.name, person.home.city, person.home.zip_code) == ("ann", "Oslo", "0150")

    def test_missing_keys_decode_as_none(self, mapper: DocumentMapper) -> None:
        person = mapper.from_document({"name": "ann", "home": {"city": "Oslo"}}, Person)
        assert person.home.zip_code is None

    def test_valid_document_values(self, mapper: DocumentMapper) -> None:
        codec = mapper.codec_for(FieldType.OBJECT)
        assert codec.is_valid_document_value({"a": 1})
        assert codec.is_valid_document_value(ObjectId())
        assert not codec.is_valid_document_value("oops")

    def test_non_document_value(self, mapper: DocumentMapper) -> None:
        with pytest.raises(UnsupportedShapeError):
            mapper.from_document_value("oops", Location)
        with pytest.raises(UnsupportedShapeError, match="embedded document"):
            mapper.codec_for(FieldType.OBJECT).from_document_value([], Location, None)


class TestRequiredFields:
    def test_encode_rejects_missing_required(self, mapper: DocumentMapper) -> None:
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            mapper.to_document(Location(None))  # type: ignore[arg-type]
        assert exc_info.value.field_name == "city"
        assert exc_info.value.target_class == "Location"

    def test_decode_rejects_missing_required(self, mapper: DocumentMapper) -> None:
        with pytest.raises(MissingRequiredFieldError, match="'city' in Location"):
            mapper.from_document({"zip": "0150"}, Location)

    def test_decode_rejects_explicit_null(self, mapper: DocumentMapper) -> None:
        with pytest.raises(MissingRequiredFieldError):
            mapper.from_document({"name": "ann", "home": {"city": None}}, Person)


class TestElements:
    def test_master_document_includes_id(self, mapper: DocumentMapper) -> None:
        ship = Ship("Fram")
        assert mapper.to_document(ship) == {"_id": ship.id, "name": "Fram"}

    def test_master_document_round_trip_keeps_id(self, mapper: DocumentMapper) -> None:
        ship = Ship("Fram")
        restored = mapper.from_document(mapper.to_document(ship), Ship)
        assert restored.id == ship.id
        assert restored.name == "Fram"

    def test_embedded_element_stored_as_reference(self, mapper: DocumentMapper) -> None:
        flagship, escort = Ship("Fram"), Ship("Gjoa")
        assert mapper.to_document(Fleet(flagship, escort)) == {
            "flagship": flagship.id,
            "escort": escort.id,
        }

    def test_references_are_not_resolved(self, mapper: DocumentMapper) -> None:
        fleet = mapper.from_document({"flagship": ObjectId(), "escort": ObjectId()}, Fleet)
        assert fleet.flagship is None
        assert fleet.escort is None


class TestMaps:
    def test_encode_stringifies_keys(self, mapper: DocumentMapper) -> None:
        board = Scoreboard({1: 2.5, 2: 4.0})
        assert mapper.to_document(board) == {"scores": {"1": 2.5, "2": 4.0}}

    def test_decode_restores_keys(self, mapper: DocumentMapper) -> None:
        board = mapper.from_document({"scores": {"1": 2.5, "2": 4}}, Scoreboard)
        assert board.scores == {1: 2.5, 2: 4.0}

    def test_nested_map_rejected_at_extraction(self, mapper: DocumentMapper) -> None:
        with pytest.raises(MetadataError, match="cells"):
            mapper.to_document(Grid({"a": {"b": 1}}))

    def test_defaultdict_round_trip(self, mapper: DocumentMapper) -> None:
        tally = Tally(defaultdict(int, {"a": 1, "b": 2}))
        document = mapper.to_document(tally)
        assert document == {"counts": {"a": 1, "b": 2}}
        restored = mapper.from_document(document, Tally)
        assert isinstance(restored.counts, defaultdict)
        assert restored.counts == {"a": 1, "b": 2}

    def test_ordered_dict_round_trip(self, mapper: DocumentMapper) -> None:
        ledger = Ledger(OrderedDict([("z", 1.5), ("a", 2.0)]))
        restored = mapper.from_document(mapper.to_document(ledger), Ledger)
        assert isinstance(restored.entries, OrderedDict)
        assert list(restored.entries.items()) == [("z", 1.5), ("a", 2.0)]

    def test_map_without_field_options(self, mapper: DocumentMapper) -> None:
        with pytest.raises(UnsupportedShapeError, match="primary fields"):
            mapper.to_document_value({"a": 1})
        with pytest.raises(UnsupportedShapeError, match="primary fields"):
            mapper.from_document_value({"a": 1}, dict[str, int])


class TestEnums:
    def test_encode_with_discriminator(self, mapper: DocumentMapper) -> None:
        assert mapper.to_document_value(Planet.EARTH) == {
            "mass": 5.976e24,
            "radius": 6.37814e6,
            "_enumValue": "EARTH",
        }

    def test_decode_by_member_name(self, mapper: DocumentMapper) -> None:
        document = {"mass": 3.303e23, "radius": 2.4397e6, "_enumValue": "MERCURY"}
        assert mapper.from_document_value(document, Planet) is Planet.MERCURY

    def test_enum_without_fields(self, mapper: DocumentMapper) -> None:
        assert mapper.to_document_value(Color.BLUE) == {"_enumValue": "BLUE"}
        assert mapper.from_document_value({"_enumValue": "RED"}, Color) is Color.RED

    def test_custom_discriminator_key(self) -> None:
        mapper = DocumentMapper(MapperConfig(enum_key="kind"))
        assert mapper.to_document_value(Color.RED) == {"kind": "RED"}
        assert mapper.from_document_value({"kind": "BLUE"}, Color) is Color.BLUE

    def test_missing_discriminator(self, mapper: DocumentMapper) -> None:
        with pytest.raises(MissingRequiredFieldError, match="_enumValue"):
            mapper.from_document_value({}, Color)

    def test_unknown_member(self, mapper: DocumentMapper) -> None:
        with pytest.raises(UnsupportedShapeError, match="PINK"):
            mapper.from_document_value({"_enumValue": "PINK"}, Color)

    def test_required_enum_field(self, mapper: DocumentMapper) -> None:
        with pytest.raises(MissingRequiredFieldError, match="'mass' in Planet"):
            mapper.from_document_value({"_enumValue": "EARTH"}, Planet)


class TestNestingDepth:
    def test_self_embedding_object_rejected(self, shallow_mapper: DocumentMapper) -> None:
        node = Node("loop")
        node.child = node
        with pytest.raises(NestingTooDeepError) as exc_info:
            shallow_mapper.to_document(node)
        assert exc_info.value.max_depth == 2
        assert isinstance(exc_info.value, UnsupportedShapeError)

    def test_depth_recovers_after_failure(self, shallow_mapper: DocumentMapper) -> None:
        node = Node("loop")
        node.child = node
        with pytest.raises(NestingTooDeepError):
            shallow_mapper.to_document(node)
        assert shallow_mapper.to_document(Node("a", Node("b"))) == {
            "label": "a",
            "child": {"label": "b", "child": None},
        }

    def test_deep_document_rejected(self, shallow_mapper: DocumentMapper) -> None:
        document = {"label": "a", "child": {"label": "b", "child": {"label": "c"}}}
        with pytest.raises(NestingTooDeepError):
            shallow_mapper.from_document(document, Node)

    def test_default_limit_allows_deep_chains(self, mapper: DocumentMapper) -> None:
        node = Node("0")
        for i in range(1, 30):
            node = Node(str(i), node)
        restored = mapper.from_document(mapper.to_document(node), Node)
        assert restored.label == "29"
        assert restored.child.child.label == "27"


class TestFieldAccess:
    def test_unreadable_field(self, mapper: DocumentMapper) -> None:
        with pytest.raises(AccessError) as exc_info:
            mapper.to_document(Lazy("x"))
        assert exc_info.value.field_name == "name"
        assert isinstance(exc_info.value.__cause__, AttributeError)

    def test_unwritable_field(self, mapper: DocumentMapper) -> None:
        assert mapper.to_document(Badge("b1")) == {"code": "b1", "holder": "nobody"}
        with pytest.raises(AccessError, match="holder"):
            mapper.from_document({"code": "b1", "holder": "ann"}, Badge)
