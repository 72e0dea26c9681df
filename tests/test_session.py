import base64
import hashlib
import hmac
import itertools
from typing import List

import pytest

from hash_ripper.core.algorithms import HASH_ALGORITHMS, HashAlgorithm, KeyedAlgorithm
from hash_ripper.core.catalog import DictionaryCatalog
from hash_ripper.core.session import (
    HashMatchSession,
    KeyedMatchSession,
    LuckyMatchSession,
    SessionState,
)
from hash_ripper.core.sources import GeneratedSource, ListSource
from hash_ripper.utils.exceptions import SessionStateError, UnsupportedAlgorithmError

MY_WORD_MD5 = "e4eac943e400cd75335ce2a751e794f4"
UNBOUNDED = float("inf")


def md5(word: str) -> str:
    return hashlib.md5(word.encode()).hexdigest()


def ticking_clock(step: float = 1.0):
    """Clock that moves forward by `step` seconds on every read"""
    ticks = itertools.count(start=0.0, step=step)
    return lambda: next(ticks)


def numbers(count: int) -> List[str]:
    return [str(n) for n in range(count)]


def numbers_catalog(count: int) -> DictionaryCatalog:
    catalog = DictionaryCatalog()
    catalog.add("numbers", "\n".join(numbers(count)) + "\n")
    catalog.select(["numbers"])
    return catalog


class RecordingSource(ListSource):
    def __init__(self, words):
        super().__init__(words)
        self.handed_out: List[str] = []

    def fetch_chunk(self, size):
        chunk = super().fetch_chunk(size)
        if chunk:
            self.handed_out.extend(chunk)
        return chunk


def make_hash_session(words, target, algorithm=HashAlgorithm.MD5, **kwargs) -> HashMatchSession:
    session = HashMatchSession(ListSource(words), **kwargs)
    session.select_algorithm(algorithm)
    session.set_target(target)
    return session


def test_single_check_finds_word_in_list() -> None:
    catalog = DictionaryCatalog()
    catalog.add("english", "one\r\ntwo\r\nmy_word\r\nthree")
    catalog.select(["english"])

    session = HashMatchSession()
    session.use_catalog(catalog)
    session.select_algorithm(HashAlgorithm.MD5)
    session.set_target(MY_WORD_MD5)
    session.start_matching()

    assert session.check(500)
    assert session.get_match() == "my_word"
    assert session.state is SessionState.MATCHED
    assert not session.is_checking()
    assert session.get_word_list_count() == 4


@pytest.mark.parametrize(
    "algorithm, target",
    [
        (HashAlgorithm.MD5, MY_WORD_MD5.upper()),
        (HashAlgorithm.SHA256, hashlib.sha256(b"my_word").hexdigest().upper()),
        (HashAlgorithm.SHA1, hashlib.sha1(b"my_word").hexdigest().upper()),
        (HashAlgorithm.BASE64, "bXlfd29yZA=="),
    ],
)
def test_upper_case_hex_targets_match(algorithm: HashAlgorithm, target: str) -> None:
    session = make_hash_session(["one", "two", "my_word", "three"], target, algorithm)
    session.start_matching()

    assert session.check(500)
    assert session.get_match() == "my_word"


def test_base64_target_is_compared_exactly() -> None:
    session = make_hash_session(["one", "my_word"], "bxlfd29yza==", HashAlgorithm.BASE64)
    session.start_matching()

    assert not session.check(500)
    assert session.state is SessionState.EXHAUSTED


def test_target_may_be_set_before_algorithm() -> None:
    session = HashMatchSession(ListSource(["my_word"]))
    session.set_target("  " + MY_WORD_MD5.upper() + "\n")
    session.select_algorithm(HashAlgorithm.MD5)
    session.start_matching()

    assert session.check(500)


def test_loops_until_match_in_large_list() -> None:
    session = HashMatchSession()
    session.use_catalog(numbers_catalog(99999))
    session.select_algorithm(HashAlgorithm.MD5)
    session.set_target(md5("99998"))
    session.start_matching()

    while session.is_checking():
        session.check(500)

    assert session.get_match() == "99998"
    assert session.get_progress() == 99999
    assert session.get_elapsed_seconds() >= 0.0
    assert session.get_last_word() == "99998"


def test_generated_source_search() -> None:
    catalog = DictionaryCatalog()
    catalog.use_generated("0123456789", 3)

    session = HashMatchSession()
    session.use_catalog(catalog)
    session.select_algorithm(HashAlgorithm.MD5)
    session.set_target("dc5c7986daef50c1e02ab09b442ee34f")
    session.start_matching()

    while session.is_checking():
        session.check(500)

    assert session.get_match() == "001"
    assert session.get_progress() > 0


def test_exhaustion_is_not_an_error() -> None:
    session = make_hash_session(numbers(1200), md5("nope"))
    session.start_matching()

    assert not session.check(UNBOUNDED)
    assert session.get_match() is None
    assert session.state is SessionState.EXHAUSTED
    assert not session.is_checking()
    assert session.get_progress() == 1200
    assert not session.check(500)


def test_empty_source_is_exhausted_immediately() -> None:
    session = make_hash_session([], MY_WORD_MD5)
    session.start_matching()

    assert not session.is_checking()
    assert not session.check(500)
    assert session.state is SessionState.EXHAUSTED


def test_check_before_start_is_a_usage_error() -> None:
    session = make_hash_session(["my_word"], MY_WORD_MD5)
    assert not session.is_checking()
    with pytest.raises(SessionStateError):
        session.check(500)


def test_start_requires_algorithm_and_source() -> None:
    without_algorithm = HashMatchSession(ListSource(["a"]))
    with pytest.raises(SessionStateError):
        without_algorithm.start_matching()

    without_source = HashMatchSession()
    without_source.select_algorithm(HashAlgorithm.MD5)
    with pytest.raises(SessionStateError):
        without_source.start_matching()


def test_select_unkeyed_session_rejects_keyed_algorithm() -> None:
    with pytest.raises(UnsupportedAlgorithmError):
        HashMatchSession().select_algorithm(KeyedAlgorithm.HMAC_MD5)


def test_chunk_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        HashMatchSession(chunk_size=0)


def test_small_budgets_resume_without_repeats_or_gaps() -> None:
    words = numbers(1000)
    source = RecordingSource(words)
    session = HashMatchSession(source, chunk_size=7, clock=ticking_clock())
    session.select_algorithm(HashAlgorithm.MD5)
    session.set_target(md5("nope"))
    session.start_matching()

    calls = 0
    progress = []
    while session.is_checking():
        session.check(500)
        calls += 1
        progress.append(session.get_progress())

    assert source.handed_out == words
    assert calls == -(-1000 // 7)
    assert progress == sorted(progress)
    assert progress[-1] == 1000


@pytest.mark.parametrize("target_word", ["0", "499", "500", "777", "999", "missing"])
def test_budget_granularity_does_not_change_outcome(target_word: str) -> None:
    words = numbers(1000)

    sliced = HashMatchSession(ListSource(words), chunk_size=10, clock=ticking_clock())
    sliced.select_algorithm(HashAlgorithm.SHA1)
    sliced.set_target(hashlib.sha1(target_word.encode()).hexdigest())
    sliced.start_matching()
    calls = 0
    while sliced.is_checking():
        sliced.check(1)
        calls += 1

    whole = HashMatchSession(ListSource(words), chunk_size=10)
    whole.select_algorithm(HashAlgorithm.SHA1)
    whole.set_target(hashlib.sha1(target_word.encode()).hexdigest())
    whole.start_matching()
    whole.check(UNBOUNDED)

    assert sliced.get_match() == whole.get_match()
    assert sliced.state is whole.state
    assert sliced.get_progress() == whole.get_progress()
    if target_word == "missing":
        assert sliced.get_match() is None
        assert calls == 100


def test_last_word_and_elapsed_before_start() -> None:
    session = make_hash_session(["a"], MY_WORD_MD5, clock=ticking_clock())
    assert session.get_last_word() == ""
    assert session.get_elapsed_seconds() == 0.0
    assert session.get_progress() == 0


def test_elapsed_seconds_uses_clock() -> None:
    session = make_hash_session(["a"], MY_WORD_MD5, clock=ticking_clock(2.0))
    session.start_matching()
    assert session.get_elapsed_seconds() == 2.0


def test_restart_matching_resets_state() -> None:
    session = make_hash_session(["one", "my_word"], MY_WORD_MD5)
    session.start_matching()
    session.check(500)
    assert session.get_match() == "my_word"

    session.start_matching()
    assert session.get_match() is None
    assert session.get_progress() == 0
    assert session.state is SessionState.ARMED
    assert session.check(500)


def test_reconfiguring_during_search_is_rejected() -> None:
    session = None

    class MeddlingSource(ListSource):
        def fetch_chunk(self, size):
            session.set_target("0" * 32)
            return super().fetch_chunk(size)

    session = HashMatchSession(MeddlingSource(["a", "b"]))
    session.select_algorithm(HashAlgorithm.MD5)
    session.set_target(MY_WORD_MD5)
    session.start_matching()

    with pytest.raises(SessionStateError):
        session.check(500)
    assert session.state is SessionState.ARMED


def test_lucky_session_finds_word() -> None:
    session = LuckyMatchSession()
    session.use_catalog(numbers_catalog(60))
    session.set_target("daa136908bd66810f306b788c644f470")
    session.start_matching()

    while session.is_checking():
        session.check(500)

    assert session.get_match() == "20"
    assert session.get_current_algorithm() is HashAlgorithm.MD5
    assert session.get_progress() > 0


def test_lucky_session_finds_word_whatever_the_algorithm_order() -> None:
    session = LuckyMatchSession(ListSource(numbers(60)))
    session.select_algorithms(reversed(HASH_ALGORITHMS))
    session.set_target(md5("20").upper())
    session.start_matching()

    while session.is_checking():
        session.check(500)

    assert session.get_match() == "20"
    assert session.get_current_algorithm() is HashAlgorithm.MD5
    assert session.get_progress() == (len(HASH_ALGORITHMS) - 1) * 60 + 60


def test_lucky_session_keeps_base64_target_case() -> None:
    session = LuckyMatchSession(ListSource(numbers(60)))
    session.set_target(base64.b64encode(b"20").decode())
    session.start_matching()

    assert session.check(UNBOUNDED)
    assert session.get_match() == "20"
    assert session.get_current_algorithm() is HashAlgorithm.BASE64


def test_lucky_session_progress_is_monotonic_until_the_end() -> None:
    word_limit = 1000
    session = LuckyMatchSession(ListSource(numbers(word_limit)), clock=ticking_clock())
    session.set_target("noway")
    session.start_matching()

    output = []
    while session.is_checking():
        session.check(500)
        output.append(session.get_progress())

    assert len(output) > len(HASH_ALGORITHMS)
    assert output == sorted(output)
    assert output[-1] == word_limit * len(HASH_ALGORITHMS)
    assert session.state is SessionState.EXHAUSTED
    assert session.get_match() is None


def test_lucky_session_single_unbounded_call_tries_every_algorithm() -> None:
    session = LuckyMatchSession(GeneratedSource("ab", 3))
    session.set_target("noway")
    session.start_matching()

    assert not session.check(UNBOUNDED)
    assert session.state is SessionState.EXHAUSTED
    assert session.get_progress() == 14 * len(HASH_ALGORITHMS)


def test_lucky_session_subset_of_algorithms() -> None:
    session = LuckyMatchSession(ListSource(numbers(10)))
    session.select_algorithms([HashAlgorithm.SHA1, HashAlgorithm.SHA256])
    session.set_target(hashlib.sha256(b"7").hexdigest())
    session.start_matching()

    assert session.check(UNBOUNDED)
    assert session.get_match() == "7"
    assert session.get_progress() == 20


def test_lucky_session_rejects_empty_selection() -> None:
    with pytest.raises(SessionStateError):
        LuckyMatchSession().select_algorithms([])


def hmac_sha256(key: str, word: str) -> str:
    return hmac.new(key.encode(), word.encode(), hashlib.sha256).hexdigest()


def make_keyed_session(words, keys, target, **kwargs) -> KeyedMatchSession:
    session = KeyedMatchSession(ListSource(words), key_source=ListSource(keys), **kwargs)
    session.select_algorithm(KeyedAlgorithm.HMAC_SHA256)
    session.set_target(target)
    return session


def test_keyed_session_finds_word_and_key() -> None:
    session = make_keyed_session(
        ["alpha", "beta", "gamma"], ["k1", "k2", "k3"], hmac_sha256("k2", "gamma")
    )
    session.start_matching()

    assert session.check(UNBOUNDED)
    assert session.get_match() == "gamma"
    assert session.get_match_key() == "k2"
    assert session.get_last_key() == "k2"
    assert session.get_last_word() == "gamma"
    assert session.get_progress() == 6


def test_keyed_session_exhausts_every_key() -> None:
    session = make_keyed_session(["alpha", "beta", "gamma"], ["k1", "k2", "k3"], "00")
    session.start_matching()

    assert not session.check(UNBOUNDED)
    assert session.state is SessionState.EXHAUSTED
    assert not session.is_checking()
    assert session.get_progress() == 9
    assert session.get_match_key() is None


def test_keyed_session_in_slices_matches_single_call() -> None:
    words = numbers(50)
    keys = ["red", "green", "blue", "black"]
    target = hmac_sha256("blue", "42")

    sliced = make_keyed_session(words, keys, target, chunk_size=3, clock=ticking_clock())
    sliced.start_matching()
    progress = []
    while sliced.is_checking():
        sliced.check(100)
        progress.append(sliced.get_progress())

    whole = make_keyed_session(words, keys, target, chunk_size=3)
    whole.start_matching()
    whole.check(UNBOUNDED)

    assert sliced.get_match() == whole.get_match() == "42"
    assert sliced.get_match_key() == whole.get_match_key() == "blue"
    assert progress == sorted(progress)
    assert sliced.get_progress() == whole.get_progress() == 2 * 50 + 45


def test_keyed_session_with_generated_keys() -> None:
    session = KeyedMatchSession(
        ListSource(["secret", "public"]), key_source=GeneratedSource("xy", 2)
    )
    session.select_algorithm(KeyedAlgorithm.HMAC_MD5)
    session.set_target(hmac.new(b"yx", b"public", hashlib.md5).hexdigest())
    session.start_matching()

    assert session.check(UNBOUNDED)
    assert session.get_match() == "public"
    assert session.get_match_key() == "yx"


def test_keyed_session_requires_key_source() -> None:
    session = KeyedMatchSession(ListSource(["a"]))
    session.select_algorithm(KeyedAlgorithm.HMAC_SHA1)
    assert not session.is_checking()
    with pytest.raises(SessionStateError):
        session.start_matching()


def test_keyed_session_rejects_unkeyed_algorithm() -> None:
    with pytest.raises(UnsupportedAlgorithmError):
        KeyedMatchSession().select_algorithm(HashAlgorithm.MD5)


def test_keyed_session_with_no_keys_is_exhausted() -> None:
    session = make_keyed_session(["a"], [], "00")
    session.start_matching()

    assert not session.is_checking()
    assert not session.check(500)
    assert session.state is SessionState.EXHAUSTED


def armed_after_one_slice(session):
    session.start_matching()
    session.check(0)
    assert session.state is SessionState.ARMED
    return session


def test_target_change_between_slices_is_rejected() -> None:
    session = HashMatchSession(ListSource(numbers(20)), chunk_size=5, clock=ticking_clock())
    session.select_algorithm(HashAlgorithm.MD5)
    session.set_target(md5("nothing"))
    armed_after_one_slice(session)

    with pytest.raises(SessionStateError):
        session.set_target(md5("15"))
    with pytest.raises(SessionStateError):
        session.select_algorithm(HashAlgorithm.SHA1)
    assert session.target == md5("nothing")


def test_source_change_between_slices_is_rejected() -> None:
    session = make_hash_session(numbers(20), md5("nothing"), chunk_size=5, clock=ticking_clock())
    armed_after_one_slice(session)
    other = ListSource(numbers(10))

    with pytest.raises(SessionStateError):
        session.set_source(other)
    with pytest.raises(SessionStateError):
        session.use_catalog(numbers_catalog(10))

    while session.is_checking():
        session.check(0)
    assert session.get_progress() == 20
    assert other.cursor_position() == 0


def test_lucky_algorithms_and_target_fixed_between_slices() -> None:
    session = LuckyMatchSession(ListSource(numbers(20)), chunk_size=5, clock=ticking_clock())
    session.select_algorithms([HashAlgorithm.SHA1, HashAlgorithm.MD5])
    session.set_target("nothing")
    armed_after_one_slice(session)

    with pytest.raises(SessionStateError):
        session.set_target(md5("3"))
    with pytest.raises(SessionStateError):
        session.select_algorithms([HashAlgorithm.MD5])

    while session.is_checking():
        session.check(0)
    assert session.get_match() is None
    assert session.state is SessionState.EXHAUSTED
    assert session.get_progress() == 40


def test_key_source_fixed_between_slices() -> None:
    session = make_keyed_session(numbers(20), ["k1", "k2"], "00", chunk_size=5, clock=ticking_clock())
    armed_after_one_slice(session)

    with pytest.raises(SessionStateError):
        session.set_key_source(ListSource(["k3"]))
    with pytest.raises(SessionStateError):
        session.select_algorithm(KeyedAlgorithm.HMAC_MD5)


def test_reconfigure_after_stop_or_finish() -> None:
    session = HashMatchSession(ListSource(numbers(20)), chunk_size=5, clock=ticking_clock())
    session.select_algorithm(HashAlgorithm.MD5)
    session.set_target(md5("nothing"))
    armed_after_one_slice(session)

    session.stop_matching()
    assert session.state is SessionState.IDLE
    assert not session.is_checking()
    session.set_target(md5("15"))
    session.start_matching()
    while session.is_checking():
        session.check(0)
    assert session.get_match() == "15"

    session.set_target(md5("3"))
    session.set_source(ListSource(numbers(5)))
    session.start_matching()
    assert session.check(UNBOUNDED)
    assert session.get_match() == "3"


def test_start_matching_again_restarts_an_armed_search() -> None:
    session = make_hash_session(numbers(20), md5("12"), chunk_size=5, clock=ticking_clock())
    armed_after_one_slice(session)
    assert session.get_progress() == 5

    session.start_matching()
    assert session.get_progress() == 0
    assert session.check(UNBOUNDED)
    assert session.get_match() == "12"


def test_stop_matching_inside_check_is_rejected() -> None:
    session = None

    class StoppingSource(ListSource):
        def fetch_chunk(self, size):
            session.stop_matching()
            return super().fetch_chunk(size)

    session = HashMatchSession(StoppingSource(["a"]))
    session.select_algorithm(HashAlgorithm.MD5)
    session.set_target(MY_WORD_MD5)
    session.start_matching()

    with pytest.raises(SessionStateError):
        session.check(500)
