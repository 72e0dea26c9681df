"""
Matching sessions for the Hash Ripper.

A session drives a word source against one or more digest functions in time
slices. The caller starts it once and then calls check() repeatedly with a
budget in milliseconds; each call returns control after the chunk during which
the budget ran out, leaving the cursor where scanning stopped.
"""

import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Iterable, List, Optional

from .algorithms import (
    HASH_ALGORITHMS,
    HashAlgorithm,
    KeyedAlgorithm,
    algorithm_name,
    is_case_sensitive,
    resolve,
    resolve_keyed,
)
from .catalog import DictionaryCatalog
from .sources import WordSource
from hash_ripper.utils.exceptions import SessionStateError
from hash_ripper.utils.logger import get_logger

DEFAULT_CHUNK_SIZE = 500

Encoder = Callable[[bytes], str]


class SessionState(Enum):
    IDLE = "idle"
    ARMED = "armed"
    SEARCHING = "searching"
    MATCHED = "matched"
    EXHAUSTED = "exhausted"


class MatchSession(ABC):
    """Base class for resumable, time-sliced digest searches

    Subclasses decide which digest function applies to the next chunk and when
    the search has run out of candidates.
    """

    def __init__(self, source: Optional[WordSource] = None,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 clock: Callable[[], float] = time.time,
                 logger=None):
        """Initialize the session

        Args:
            source: Word source to search
            chunk_size: Words fetched between budget checks
            clock: Function returning the current time in seconds
            logger: Optional logger instance (default: the package's
                "session" child logger)
        """
        if chunk_size < 1:
            raise ValueError("Chunk size must be at least 1")

        self.source = source
        self.chunk_size = chunk_size
        self.clock = clock
        self.logger = logger or get_logger("session")

        self.target = ""
        self.match: Optional[str] = None
        self.started_at: Optional[float] = None
        self._state = SessionState.IDLE
        self._normalized_target = ""

    @property
    def state(self) -> SessionState:
        return self._state

    def _ensure_configurable(self) -> None:
        # An armed session is mid-search between two check() calls
        if self._state in (SessionState.ARMED, SessionState.SEARCHING):
            raise SessionStateError(
                "Cannot reconfigure a session during a search; "
                "let it finish or call stop_matching() first"
            )

    def set_source(self, source: WordSource) -> None:
        self._ensure_configurable()
        self.source = source

    def use_catalog(self, catalog: DictionaryCatalog) -> None:
        """Search a fresh source built from the catalog"""
        self.set_source(catalog.build_source())

    def set_target(self, digest: str) -> None:
        self._ensure_configurable()
        self.target = digest.strip()

    @staticmethod
    def _normalize_target(target: str, algorithm) -> str:
        if is_case_sensitive(algorithm):
            return target
        return target.lower()

    def start_matching(self) -> None:
        """Reset the search and arm the session

        Starting again while armed abandons the running search.

        Raises:
            SessionStateError: If the session is missing a source or algorithm
        """
        if self._state is SessionState.SEARCHING:
            raise SessionStateError("Cannot restart a session from inside check()")
        if self.source is None:
            raise SessionStateError("Set a word source before starting to match")

        self._prepare()

        self.match = None
        self.source.restart()
        self.started_at = self.clock()
        self._state = SessionState.ARMED
        self.logger.info(f"Started matching against {self.target!r}")

    def stop_matching(self) -> None:
        """Abandon the running search so the session can be reconfigured"""
        if self._state is SessionState.SEARCHING:
            raise SessionStateError("Cannot stop a session from inside check()")
        if self._state is SessionState.ARMED:
            self.logger.info(f"Stopped matching after {self.get_progress():,} candidates")
        self.match = None
        self._state = SessionState.IDLE

    @abstractmethod
    def _prepare(self) -> None:
        """Resolve digest functions and reset variant state for a new search"""
        pass

    @abstractmethod
    def _next_encoder(self) -> Optional[Encoder]:
        """Digest function for the next chunk, or None when nothing is left

        May restart the source to begin another pass.
        """
        pass

    @abstractmethod
    def _is_exhausted(self) -> bool:
        pass

    def _scan(self, chunk: List[str], encode: Encoder) -> Optional[str]:
        """Return the first word in the chunk whose digest equals the target"""
        target = self._normalized_target
        for word in chunk:
            if encode(word.encode("utf-8")) == target:
                return word
        return None

    def check(self, budget_ms: float) -> bool:
        """Search until a match, exhaustion, or the budget runs out

        The budget is tested after each chunk, so a call may overrun it by up
        to one chunk of work.

        Args:
            budget_ms: Wall-clock budget for this call in milliseconds

        Returns:
            True if a match has been found
        """
        if self._state is SessionState.IDLE:
            raise SessionStateError("Call start_matching() before check()")
        if self._state is SessionState.SEARCHING:
            raise SessionStateError("check() is already running")
        if self._state in (SessionState.MATCHED, SessionState.EXHAUSTED):
            return self.match is not None

        started = self.clock()
        self._state = SessionState.SEARCHING
        try:
            while True:
                encode = self._next_encoder()
                if encode is None:
                    break

                chunk = self.source.fetch_chunk(self.chunk_size)
                if chunk:
                    self.match = self._scan(chunk, encode)
                    if self.match is not None:
                        break

                if (self.clock() - started) * 1000 > budget_ms:
                    break
        finally:
            if self.match is not None:
                self._state = SessionState.MATCHED
                self.logger.info(f"Match found after {self.get_elapsed_seconds():.2f} seconds: {self.match}")
            elif self._is_exhausted():
                self._state = SessionState.EXHAUSTED
                self.logger.info(f"Search exhausted after {self.get_progress():,} candidates")
            else:
                self._state = SessionState.ARMED

        return self.match is not None

    def is_checking(self) -> bool:
        """Whether the host should keep calling check()"""
        if self._state is SessionState.IDLE:
            return False
        return self.match is None and not self._is_exhausted()

    def get_progress(self) -> int:
        return self.source.cursor_position() if self.source else 0

    def get_match(self) -> Optional[str]:
        return self.match

    def get_word_list_count(self) -> int:
        return self.source.total_known_length() if self.source else 0

    def get_last_word(self) -> str:
        if self.source is None:
            return ""
        return self.source.last_produced() or ""

    def get_elapsed_seconds(self) -> float:
        if self.started_at is None:
            return 0.0
        return self.clock() - self.started_at


class HashMatchSession(MatchSession):
    """Search with a single hash algorithm"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.algorithm: Optional[HashAlgorithm] = None
        self._encoder: Optional[Encoder] = None

    def select_algorithm(self, algorithm: HashAlgorithm) -> None:
        self._ensure_configurable()
        resolve(algorithm)
        self.algorithm = HashAlgorithm(algorithm)

    def _prepare(self) -> None:
        if self.algorithm is None:
            raise SessionStateError("Select an algorithm before starting to match")
        self._encoder = resolve(self.algorithm)
        self._normalized_target = self._normalize_target(self.target, self.algorithm)

    def _next_encoder(self) -> Optional[Encoder]:
        if self.source.has_ended():
            return None
        return self._encoder

    def _is_exhausted(self) -> bool:
        return self.source.has_ended()


class LuckyMatchSession(MatchSession):
    """Search with every hash algorithm in turn, one full pass each"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.algorithms: List[HashAlgorithm] = list(HASH_ALGORITHMS)
        self._pending: List[HashAlgorithm] = []
        self._current: Optional[HashAlgorithm] = None
        self._encoder: Optional[Encoder] = None
        self._completed = 0

    def select_algorithms(self, algorithms: Optional[Iterable[HashAlgorithm]] = None) -> None:
        """Choose the algorithms to try, in order (default: all of them)"""
        self._ensure_configurable()
        chosen = []
        for algorithm in (HASH_ALGORITHMS if algorithms is None else algorithms):
            resolve(algorithm)
            chosen.append(HashAlgorithm(algorithm))
        if not chosen:
            raise SessionStateError("Select at least one algorithm")
        self.algorithms = chosen

    def _prepare(self) -> None:
        if not self.algorithms:
            raise SessionStateError("Select an algorithm before starting to match")
        self._pending = list(self.algorithms)
        self._current = None
        self._encoder = None
        self._completed = 0

    def _next_encoder(self) -> Optional[Encoder]:
        if self._current is not None and self.source.has_ended():
            self._completed += self.source.total_known_length()
            self.logger.debug(f"Finished pass with {algorithm_name(self._current)}")
            self._current = None

        if self._current is None:
            if not self._pending:
                return None
            self._current = self._pending.pop(0)
            self._encoder = resolve(self._current)
            self._normalized_target = self._normalize_target(self.target, self._current)
            self.source.restart()
            self.logger.debug(f"Trying {algorithm_name(self._current)}")

        return self._encoder

    def _is_exhausted(self) -> bool:
        return not self._pending and (self._current is None or self.source.has_ended())

    def get_current_algorithm(self) -> Optional[HashAlgorithm]:
        return self._current

    def get_progress(self) -> int:
        if self._current is None:
            return self._completed
        return self._completed + self.source.cursor_position()


class KeyedMatchSession(MatchSession):
    """Search a keyed algorithm, replaying the word source once per key"""

    def __init__(self, *args, key_source: Optional[WordSource] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.key_source = key_source
        self.algorithm: Optional[KeyedAlgorithm] = None
        self.match_key: Optional[str] = None
        self._function = None
        self._key: Optional[str] = None
        self._completed = 0

    def select_algorithm(self, algorithm: KeyedAlgorithm) -> None:
        self._ensure_configurable()
        resolve_keyed(algorithm)
        self.algorithm = KeyedAlgorithm(algorithm)

    def set_key_source(self, source: WordSource) -> None:
        self._ensure_configurable()
        self.key_source = source

    def _prepare(self) -> None:
        if self.algorithm is None:
            raise SessionStateError("Select an algorithm before starting to match")
        if self.key_source is None:
            raise SessionStateError("Set a key source before starting to match")

        self._function = resolve_keyed(self.algorithm)
        self._normalized_target = self._normalize_target(self.target, self.algorithm)
        self.key_source.restart()
        self.match_key = None
        self._key = None
        self._completed = 0

    def _next_encoder(self) -> Optional[Encoder]:
        if self._key is not None and self.source.has_ended():
            self._completed += self.source.total_known_length()
            self._key = None

        if self._key is None:
            key = self.key_source.produce_next()
            if key is None:
                return None
            self._key = key
            self.source.restart()

        function = self._function
        key_bytes = self._key.encode("utf-8")
        return lambda data: function(key_bytes, data)

    def _scan(self, chunk: List[str], encode: Encoder) -> Optional[str]:
        word = super()._scan(chunk, encode)
        if word is not None:
            self.match_key = self._key
        return word

    def _is_exhausted(self) -> bool:
        return self.key_source.has_ended() and (self._key is None or self.source.has_ended())

    def is_checking(self) -> bool:
        if self.key_source is None:
            return False
        return super().is_checking()

    def get_match_key(self) -> Optional[str]:
        return self.match_key

    def get_last_key(self) -> str:
        if self.key_source is None:
            return ""
        return self.key_source.last_produced() or ""

    def get_progress(self) -> int:
        if self._key is None:
            return self._completed
        return self._completed + self.source.cursor_position()
