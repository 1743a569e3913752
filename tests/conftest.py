import random

import pytest

from cache_placement import parse_model


# the sample from the original problem statement
EXAMPLE_INPUT = """\
5 2 4 3 100
50 50 80 30 110
1000 3
0 100
2 200
1 300
500 0
3 0 1500
0 1 1000
4 0 500
1 0 1000
"""

TRIVIAL_FIT = """\
1 1 1 1 100
50
1000 1
0 100
0 0 10
"""

NO_CACHING = """\
1 1 1 1 10
1000
1000 1
0 100
0 0 5
"""

# both videos are requested in blocks of 5, video 0 twice
CAPACITY_CONTENTION = """\
2 1 3 1 100
60 60
1000 1
0 100
0 0 5
1 0 5
0 0 5
"""


def model_from(text):
    return parse_model(text.splitlines())


def random_input(seed, num_videos=30, num_endpoints=8, num_requests=60,
                 num_caches=5, capacity=200):
    rng = random.Random(seed)
    lines = [f"{num_videos} {num_endpoints} {num_requests} {num_caches} {capacity}",
             " ".join(str(rng.randint(1, capacity + 50)) for _ in range(num_videos))]
    for _ in range(num_endpoints):
        dc = rng.randint(200, 1500)
        caches = rng.sample(range(num_caches), rng.randint(0, num_caches))
        lines.append(f"{dc} {len(caches)}")
        for cid in caches:
            lines.append(f"{cid} {rng.randint(1, dc + 100)}")
    for _ in range(num_requests):
        lines.append(f"{rng.randrange(num_videos)} {rng.randrange(num_endpoints)} "
                     f"{rng.randint(1, 1000)}")
    return "\n".join(lines) + "\n"


@pytest.fixture
def example_model():
    return model_from(EXAMPLE_INPUT)


@pytest.fixture
def trivial_model():
    return model_from(TRIVIAL_FIT)


@pytest.fixture
def uncacheable_model():
    return model_from(NO_CACHING)


@pytest.fixture
def contention_model():
    return model_from(CAPACITY_CONTENTION)


@pytest.fixture(params=[1, 2, 3])
def random_model(request):
    return model_from(random_input(request.param))


@pytest.fixture
def example_file(tmp_path):
    path = tmp_path / "example.in"
    path.write_text(EXAMPLE_INPUT)
    return path
