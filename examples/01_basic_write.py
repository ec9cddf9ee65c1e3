"""
Example 01: Basic Write

This example maps a simple bottle object to a BSON document and back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from doc_mapper import DocumentMapper, NumberField, StringField, builder


@dataclass
class Bottle:
    """A bottle, partially filled with some liquid"""
    liquid: Annotated[str, StringField("liquid", required=True)]
    capacity: Annotated[float, NumberField("capacity", required=True)]
    amount: Annotated[float, NumberField("liquid_amount", required=True)]

    @builder(amount="liquid_amount")
    @staticmethod
    def create(liquid: str, capacity: float, amount: float) -> Bottle:
        return Bottle(liquid, capacity, amount)


def main():
    mapper = DocumentMapper()

    # Object -> document
    bottle = Bottle("water", 1.5, 0.75)
    document = mapper.to_document(bottle)
    print(f"Document: {document}")

    # Document -> object (the builder runs exactly once)
    restored = mapper.from_document(document, Bottle)
    print(f"Restored: {restored}")
    assert restored == bottle

    # Binary BSON
    data = mapper.encode(bottle)
    print(f"Encoded {len(data)} bytes")
    print(f"Decoded: {mapper.decode(data, Bottle)}")


if __name__ == "__main__":
    main()
