import io

import pytest

from cache_placement import (
    AllocationState,
    InputFormatError,
    optimize,
    parse_placement,
    serialize_placement,
    write_placement,
)


def test_serialize(example_model):
    state = AllocationState(example_model)
    state.insert(1, 3)
    state.insert(1, 1)
    assert serialize_placement(state) == "3\n0\n1 1 3\n2\n"


def test_round_trip(random_model):
    state = optimize(random_model, 'advanced').state
    placement = parse_placement(serialize_placement(state))
    pairs = {(c, v) for c, videos in placement.items() for v in videos}
    assert pairs == set(state.placements())


def test_parse_ignores_listing_order():
    assert parse_placement("2\n0 5 1\n1\n") == {0: {1, 5}, 1: set()}
    assert parse_placement("2\n1\n0 1 5\n") == {0: {1, 5}, 1: set()}


@pytest.mark.parametrize("text", ["", "x\n", "2\n0 1\n", "1\n0 a\n", "2\n0 1\n0 2\n"])
def test_parse_rejects_bad_placement(text):
    with pytest.raises(InputFormatError):
        parse_placement(text)


def test_write_to_stream_and_file(example_model, tmp_path, capsys):
    state = AllocationState(example_model)
    state.insert(0, 0)

    buf = io.StringIO()
    write_placement(state, buf)
    assert buf.getvalue() == serialize_placement(state)

    path = tmp_path / "out.txt"
    write_placement(state, path)
    assert path.read_text() == serialize_placement(state)

    write_placement(state)
    assert capsys.readouterr().out == serialize_placement(state)
