"""Phonics-constrained decodable storybooks and read-aloud assessment."""

from decodable.decompose import WordDecomposer
from decodable.inventory import DEFAULT_INVENTORY, GPCInventory
from decodable.validate import DecodabilityValidator

__all__ = [
    "DEFAULT_INVENTORY",
    "DecodabilityValidator",
    "GPCInventory",
    "WordDecomposer",
]
