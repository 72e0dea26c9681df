"""
Dictionary catalog for the Hash Ripper.

The catalog caches named word lists, remembers which of them are selected and
builds a fresh word source for every search.
"""

import os
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from .sources import GeneratedSource, ListSource, WordSource
from hash_ripper.utils.exceptions import InvalidWordSourceError, WordListNotFoundError
from hash_ripper.utils.logger import get_logger

logger = get_logger("catalog")


class SourceMode(Enum):
    LIST = "list"
    GENERATED = "generated"


def split_words(raw_text: str) -> List[str]:
    """Split a word list blob on CRLF and LF line endings, dropping empty lines"""
    return [
        word
        for line in raw_text.split("\r\n")
        for word in line.split("\n")
        if word
    ]


class DictionaryCatalog:
    """Named word lists plus the selection and mode used to build sources"""

    def __init__(self):
        self.cache: Dict[str, List[str]] = {}
        self.selection: List[str] = []
        self.mode = SourceMode.LIST
        self.alphabet: List[str] = []
        self.max_length = 0

    def add(self, name: str, raw_text: str) -> None:
        """Parse a raw word list and cache it under a name"""
        words = split_words(raw_text)
        self.cache[name] = words
        logger.debug(f"Cached word list '{name}' with {len(words):,} words")

    def add_file(self, path: str, name: Optional[str] = None) -> str:
        """Read a word list file into the cache

        Args:
            path: Path to the word list file
            name: Cache name to use (default: the file's base name)

        Returns:
            The name the list was cached under
        """
        if not os.path.exists(path):
            raise WordListNotFoundError(f"Word list file not found: {path}")

        with open(path, 'r', encoding='utf-8', errors='ignore', newline='') as f:
            raw_text = f.read()

        name = name or os.path.basename(path)
        self.add(name, raw_text)
        logger.info(f"Loaded word list {path} as '{name}'")
        return name

    def has(self, name: str) -> bool:
        return name in self.cache

    def names(self) -> List[str]:
        return list(self.cache)

    def select(self, names: Iterable[str]) -> None:
        """Replace the active selection; order decides concatenation order"""
        self.selection = []
        for name in names:
            if name not in self.cache:
                logger.warning(f"Word list '{name}' is not loaded, skipping it")
                continue
            self.selection.append(name)

    def word_count(self) -> int:
        """Total number of words across the selected lists"""
        return sum(len(self.cache[name]) for name in self.selection)

    def use_list(self) -> None:
        self.mode = SourceMode.LIST

    def use_generated(self, alphabet: Sequence[str], max_length: int) -> None:
        """Switch to generated words over an alphabet"""
        if not alphabet:
            raise InvalidWordSourceError("Alphabet must not be empty")
        if len(set(alphabet)) != len(alphabet):
            raise InvalidWordSourceError("Alphabet must not contain duplicate characters")
        if max_length < 1:
            raise InvalidWordSourceError("Maximum length must be at least 1")

        self.mode = SourceMode.GENERATED
        self.alphabet = list(alphabet)
        self.max_length = max_length

    def build_source(self) -> WordSource:
        """Build a fresh word source for the current mode and selection"""
        if self.mode is SourceMode.GENERATED:
            return GeneratedSource(self.alphabet, self.max_length)

        words = [word for name in self.selection for word in self.cache[name]]
        return ListSource(words)
