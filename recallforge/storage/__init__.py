"""
Storage adapters for RecallForge.

The scheduling core is storage-agnostic; these adapters sit at the
boundary and convert between stored records and the canonical models.

Public API
----------
    from recallforge.storage import SQLiteCardRepository
    repo = SQLiteCardRepository(config.database_path)
"""

from recallforge.storage.base import CardRepository
from recallforge.storage.mapping import card_from_record, card_to_record
from recallforge.storage.memory import InMemoryCardRepository
from recallforge.storage.sqlite import SQLiteCardRepository

__all__ = [
    "CardRepository",
    "InMemoryCardRepository",
    "SQLiteCardRepository",
    "card_from_record",
    "card_to_record",
]
