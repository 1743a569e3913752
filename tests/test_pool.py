import pytest

from cache_placement.optimizers import WorkerPool


@pytest.fixture(params=[(1, 4), (3, 2), (4, 1)])
def pool(request):
    workers, chunk_size = request.param
    with WorkerPool(workers=workers, chunk_size=chunk_size) as p:
        yield p


def test_map_chunks_keeps_order(pool):
    chunks = pool.map_chunks(lambda r: list(r), 10)
    assert [i for chunk in chunks for i in chunk] == list(range(10))
    assert all(len(c) <= pool.chunk_size for c in chunks)


def test_map_chunks_empty(pool):
    assert pool.map_chunks(lambda r: list(r), 0) == []


def test_max_reduce_prefers_earliest_on_ties(pool):
    values = [3, 9, 1, 9, 4, 9, 0]

    def best(chunk):
        top = None
        for i in chunk:
            if top is None or values[i] > values[top]:
                top = i
        return top

    assert pool.max_reduce(best, len(values), key=lambda i: values[i]) == 1


def test_max_reduce_nothing_found(pool):
    assert pool.max_reduce(lambda chunk: None, 5, key=lambda x: x) is None


def test_find_first(pool):
    values = [0, 0, 1, 0, 1, 1, 0, 0, 0, 1]
    assert pool.find_first(lambda i: values[i] == 1, len(values)) == 2
    assert pool.find_first(lambda i: values[i] == 1, len(values), start=3) == 4
    assert pool.find_first(lambda i: values[i] == 1, len(values), start=6) == 9
    assert pool.find_first(lambda i: values[i] == 2, len(values)) is None
    assert pool.find_first(lambda i: True, len(values), start=10) is None


@pytest.mark.parametrize("workers, chunk_size", [(0, 1), (1, 0)])
def test_invalid_pool(workers, chunk_size):
    with pytest.raises(ValueError):
        WorkerPool(workers=workers, chunk_size=chunk_size)
