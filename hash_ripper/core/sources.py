"""
Word source classes for the Hash Ripper.

A word source hands out candidate plaintexts one at a time behind an explicit
cursor, so a search can stop after any word and pick up again later without
repeating or skipping anything.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from hash_ripper.utils.exceptions import InvalidWordSourceError


class WordSource(ABC):
    """Abstract base class for word sources"""

    @abstractmethod
    def produce_next(self) -> Optional[str]:
        """Produce the next word, or None when the source is exhausted"""
        pass

    @abstractmethod
    def cursor_position(self) -> int:
        """Number of words produced since the last restart"""
        pass

    @abstractmethod
    def total_known_length(self) -> int:
        """Number of words known to the source so far"""
        pass

    @abstractmethod
    def capacity(self) -> int:
        """Number of words one full pass of the source produces"""
        pass

    @abstractmethod
    def last_produced(self) -> Optional[str]:
        """The most recently produced word, or None if nothing was produced"""
        pass

    @abstractmethod
    def has_ended(self) -> bool:
        """Whether no further word can be produced"""
        pass

    @abstractmethod
    def restart(self) -> None:
        """Rewind to the first word"""
        pass

    def fetch_chunk(self, size: int) -> Optional[List[str]]:
        """Produce up to `size` words in one call

        Args:
            size: Maximum number of words to produce

        Returns:
            The words produced, or None if the source had nothing left
        """
        if size < 1:
            raise ValueError("Chunk size must be at least 1")

        chunk = []
        for _ in range(size):
            word = self.produce_next()
            if word is None:
                break
            chunk.append(word)

        return chunk or None


class ListSource(WordSource):
    """Word source over a materialized list of words"""

    def __init__(self, words: Optional[Sequence[str]] = None):
        """Initialize with the words to hand out, in order"""
        self.words = list(words or [])
        self.index = 0

    def produce_next(self) -> Optional[str]:
        if self.index >= len(self.words):
            return None
        word = self.words[self.index]
        self.index += 1
        return word

    def fetch_chunk(self, size: int) -> Optional[List[str]]:
        """Return the next slice of the list and move the cursor past it"""
        if size < 1:
            raise ValueError("Chunk size must be at least 1")

        chunk = self.words[self.index:self.index + size]
        self.index += len(chunk)
        return chunk or None

    def cursor_position(self) -> int:
        return self.index

    def total_known_length(self) -> int:
        return len(self.words)

    def capacity(self) -> int:
        return len(self.words)

    def last_produced(self) -> Optional[str]:
        if self.index == 0:
            return None
        return self.words[self.index - 1]

    def has_ended(self) -> bool:
        return self.index >= len(self.words)

    def restart(self) -> None:
        self.index = 0


class GeneratedSource(WordSource):
    """Word source enumerating every string over an alphabet up to a maximum length

    Words come out shortest first; within one length they are ordered as a
    base-N counter over the alphabet, most significant position leftmost. With
    alphabet "ab" and max_length 2 the sequence is a, b, aa, ab, ba, bb.
    Only the current word is ever held in memory.
    """

    def __init__(self, alphabet: Sequence[str], max_length: int):
        """Initialize with the alphabet and the maximum word length

        Args:
            alphabet: Characters to draw from, in counting order
            max_length: Longest word to produce
        """
        self.alphabet = list(alphabet)
        if len(set(self.alphabet)) != len(self.alphabet):
            raise InvalidWordSourceError("Alphabet must not contain duplicate characters")

        self.max_length = max_length
        self.digits: List[int] = []
        self.produced_count = 0

    @property
    def base(self) -> int:
        return len(self.alphabet)

    def _is_degenerate(self) -> bool:
        return not self.alphabet or self.max_length < 1

    def _is_last_word(self) -> bool:
        top = self.base - 1
        return len(self.digits) == self.max_length and all(d == top for d in self.digits)

    def _increment(self) -> None:
        """Add one to the digit counter, growing it by a digit on overflow"""
        top = self.base - 1
        carries = 0
        while self.digits and self.digits[-1] == top:
            self.digits.pop()
            carries += 1

        if self.digits:
            self.digits[-1] += 1
        else:
            # All digits were at their maximum: start the next length block
            self.digits.append(0)

        self.digits.extend([0] * carries)

    def _decode(self) -> str:
        return "".join(self.alphabet[d] for d in self.digits)

    def produce_next(self) -> Optional[str]:
        if self.has_ended():
            return None

        if not self.digits:
            self.digits = [0]
        else:
            self._increment()

        self.produced_count += 1
        return self._decode()

    def cursor_position(self) -> int:
        return self.produced_count

    def total_known_length(self) -> int:
        return self.produced_count

    def capacity(self) -> int:
        if self._is_degenerate():
            return 0
        return sum(self.base ** length for length in range(1, self.max_length + 1))

    def last_produced(self) -> Optional[str]:
        if not self.digits:
            return None
        return self._decode()

    def has_ended(self) -> bool:
        return self._is_degenerate() or self._is_last_word()

    def restart(self) -> None:
        self.digits = []
        self.produced_count = 0
