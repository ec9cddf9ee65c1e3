"""
Example 02: Nested Objects

This example demonstrates embedded documents, arrays, maps, enumerations
and element references.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated

from doc_mapper import (
    ArrayField,
    DateField,
    DocumentMapper,
    Element,
    FieldType,
    MapperConfig,
    NumberField,
    ObjectField,
    StringField,
    builder,
)


class Category(Enum):
    FOOD = "food"
    DRINK = "drink"


class Location:
    """Embedded address"""
    city: Annotated[str, StringField("city", required=True)]
    country: Annotated[str, StringField("country")]

    @builder
    def __init__(self, city: str, country: str) -> None:
        self.city = city
        self.country = country

    def __repr__(self) -> str:
        return f"Location({self.city!r}, {self.country!r})"


class Brand(Element):
    """Top-level document with its own _id"""
    name: Annotated[str, StringField("name", required=True)]
    headquarters: Annotated[Location, ObjectField("hq")]
    owners: Annotated[list[str], ArrayField("owners")]
    founded: Annotated[date, DateField("founded")]
    capital: Annotated[Decimal, NumberField("capital")]
    ratings: Annotated[dict[str, int], ObjectField("ratings", map_value_type=FieldType.NUMBER)]
    category: Annotated[Category, ObjectField("category")]
    parent: Annotated[Brand | None, ObjectField("parent")]

    @builder
    def __init__(
        self,
        name: str,
        headquarters: Location,
        owners: list[str],
        founded: date,
        capital: Decimal,
        ratings: dict[str, int],
        category: Category,
        parent: Brand | None = None,
    ) -> None:
        self.name = name
        self.headquarters = headquarters
        self.owners = owners
        self.founded = founded
        self.capital = capital
        self.ratings = ratings
        self.category = category
        self.parent = parent


def main():
    mapper = DocumentMapper(MapperConfig(enum_key="_kind"))

    acme = Brand(
        name="Acme",
        headquarters=Location("Lyon", "FR"),
        owners=["ann", "bob"],
        founded=date(1998, 4, 1),
        capital=Decimal("1250000.50"),
        ratings={"taste": 4, "price": 3},
        category=Category.FOOD,
    )
    kids = Brand(
        name="Acme Kids",
        headquarters=Location("Nice", "FR"),
        owners=["ann"],
        founded=date(2010, 9, 1),
        capital=Decimal("10000"),
        ratings={},
        category=Category.DRINK,
        parent=acme,
    )

    # Embedded documents, arrays, maps and the enum discriminator
    for document in mapper.to_documents([acme, kids]):
        print(document)

    # The parent is stored as a reference (its _id) and is not resolved on read
    restored = mapper.decode(mapper.encode(kids), Brand)
    print(f"Restored {restored.name} ({restored.id}) in {restored.headquarters}")
    print(f"Category: {restored.category}, parent: {restored.parent}")
    assert restored.id == kids.id


if __name__ == "__main__":
    main()
