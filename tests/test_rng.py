from terrain_generator.hashing import seed_hash
from terrain_generator.rng import SeededRNG


def test_same_seed_same_stream():
    a = SeededRNG("abc")
    b = SeededRNG("abc")
    assert [a.next() for _ in range(100)] == [b.next() for _ in range(100)]


def test_different_seeds_differ():
    a = SeededRNG("abc")
    b = SeededRNG("abd")
    assert [a.next() for _ in range(10)] != [b.next() for _ in range(10)]


def test_draws_are_in_unit_interval():
    rng = SeededRNG("range-check")
    for _ in range(5000):
        value = rng.next()
        assert 0.0 <= value < 1.0


def test_state_is_a_uint32_initialised_from_the_hash():
    rng = SeededRNG("abc")
    assert rng.seed == seed_hash("abc")
    assert rng.state == rng.seed
    for _ in range(1000):
        rng.next()
        assert 0 <= rng.state <= 0xFFFFFFFF


def test_reset_replays_the_stream():
    rng = SeededRNG("replay")
    first = [rng.next() for _ in range(50)]
    rng.reset()
    assert rng.state == rng.seed
    assert [rng.next() for _ in range(50)] == first


def test_range_maps_into_bounds():
    rng = SeededRNG(12345)
    reference = SeededRNG(12345)
    for _ in range(200):
        value = rng.range(-3.0, 7.0)
        assert value == -3.0 + reference.next() * 10.0
        assert -3.0 <= value < 7.0


def test_zero_numeric_seed_gets_nonzero_state():
    assert SeededRNG(0).state == 1


def test_reference_draws():
    rng = SeededRNG("abc")
    assert [rng.next() for _ in range(3)] == [0.35655662906356156, 0.06145061063580215, 0.007002958562225103]
