"""
Core functionality for the Hash Ripper.
"""

from .algorithms import (
    HashAlgorithm,
    KeyedAlgorithm,
    HASH_ALGORITHMS,
    resolve,
    resolve_keyed,
    parse_algorithm,
    encode_all,
)
from .catalog import DictionaryCatalog, SourceMode, split_words
from .session import (
    MatchSession,
    HashMatchSession,
    LuckyMatchSession,
    KeyedMatchSession,
    SessionState,
    DEFAULT_CHUNK_SIZE,
)
from .sources import WordSource, ListSource, GeneratedSource
