from tycoon.rng import UINT32_MASK, next_seed, pick_index, rand_range, random_float, shuffled, stable_seed


def test_next_seed_matches_lcg():
    assert next_seed(0) == 1013904223
    assert next_seed(1) == (1664525 + 1013904223) & UINT32_MASK


def test_random_float_in_unit_interval_and_replayable():
    seed = 42
    values = []
    for _ in range(200):
        value, seed = random_float(seed)
        assert 0.0 <= value <= 1.0
        values.append(value)

    seed = 42
    replay = []
    for _ in range(200):
        value, seed = random_float(seed)
        replay.append(value)
    assert values == replay


def test_rand_range_bounds():
    seed = 7
    for _ in range(100):
        value, seed = rand_range(seed, 0.05, 0.12)
        assert 0.05 <= value <= 0.12


def test_pick_index_stays_in_range():
    seed = 99
    for size in range(1, 20):
        index, seed = pick_index(seed, size)
        assert 0 <= index < size


def test_shuffled_is_deterministic_permutation():
    items = list(range(10))
    first, seed_a = shuffled(items, 5)
    second, seed_b = shuffled(items, 5)
    assert first == second
    assert seed_a == seed_b
    assert sorted(first) == items
    assert items == list(range(10))


def test_stable_seed_is_32_bit_and_salted():
    a = stable_seed(1, "x")
    assert a == stable_seed(1, "x")
    assert 0 <= a <= UINT32_MASK
    assert stable_seed(1, "x", salt="other") != a
