"""
Hash Ripper

Recovers the plaintext behind a digest by searching word lists or generated
candidates in small, resumable time slices.
"""

from hash_ripper.core.algorithms import HashAlgorithm, KeyedAlgorithm
from hash_ripper.core.catalog import DictionaryCatalog
from hash_ripper.core.session import (
    HashMatchSession,
    LuckyMatchSession,
    KeyedMatchSession,
)
from hash_ripper.core.sources import (
    WordSource,
    ListSource,
    GeneratedSource,
)

__version__ = "0.1.0"
