from minikern.rand import RAND_MAX, LinearCongruential


def test_first_value_from_default_seed():
    assert LinearCongruential().rand() == 16838


def test_values_in_range():
    generator = LinearCongruential(12345)
    values = [generator.rand() for _ in range(1000)]
    assert all(0 <= v <= RAND_MAX for v in values)
    assert len(set(values)) > 500


def test_same_seed_same_sequence():
    a = LinearCongruential(42)
    b = LinearCongruential(42)
    assert [a.rand() for _ in range(20)] == [b.rand() for _ in range(20)]


def test_srand_restarts_sequence():
    generator = LinearCongruential()
    first = [generator.rand() for _ in range(10)]
    generator.srand(1)
    assert [generator.rand() for _ in range(10)] == first


def test_srand_matches_constructor_seed():
    seeded = LinearCongruential(7)
    reseeded = LinearCongruential()
    reseeded.rand()
    reseeded.srand(7)
    assert [seeded.rand() for _ in range(5)] == [reseeded.rand() for _ in range(5)]