import threading

import pytest

from xornet.core.errors import InitializationOrderError, UninitializedSourceError
from xornet.core.rng import RandomSource


def test_sample_before_init_fails():
    source = RandomSource()
    assert not source.is_initialized
    with pytest.raises(UninitializedSourceError):
        source.sample(-1.0, 1.0)
    assert issubclass(UninitializedSourceError, InitializationOrderError)


def test_same_seed_gives_same_sequence():
    first, second = RandomSource(), RandomSource()
    first.init(1234)
    second.init(1234)
    a = [first.sample(-2.0, 2.0) for _ in range(50)]
    b = [second.sample(-2.0, 2.0) for _ in range(50)]
    assert a == b
    assert all(-2.0 <= x <= 2.0 for x in a)


def test_only_first_seed_takes_effect():
    source, reference = RandomSource(), RandomSource()
    source.init(1)
    source.init(2)
    reference.init(1)
    assert source.seed == 1
    assert source.sample(0.0, 1.0) == reference.sample(0.0, 1.0)


def test_concurrent_init_keeps_a_single_seed():
    source = RandomSource()
    threads = [threading.Thread(target=source.init, args=(seed,)) for seed in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    winner = source.seed
    assert winner in range(16)
    reference = RandomSource()
    reference.init(winner)
    assert source.sample(0.0, 1.0) == reference.sample(0.0, 1.0)


def test_negative_seed_is_reduced_to_32_bits():
    source, reference = RandomSource(), RandomSource()
    source.init(-7)
    reference.init(2**32 - 7)
    assert source.is_initialized
    assert source.seed == -7
    assert source.sample(0.0, 1.0) == reference.sample(0.0, 1.0)


def test_failed_init_leaves_source_unseeded():
    source = RandomSource()
    with pytest.raises(ValueError):
        source.init("not-a-seed")
    assert not source.is_initialized
    assert source.seed is None
    source.init(3)
    assert source.seed == 3


def test_sample_matrix_is_row_major():
    source, reference = RandomSource(), RandomSource()
    source.init(5)
    reference.init(5)
    mtx = source.sample_matrix(2, 3, -1.0, 1.0)
    expected = [[reference.sample(-1.0, 1.0) for _ in range(3)] for _ in range(2)]
    assert mtx.tolist() == expected
