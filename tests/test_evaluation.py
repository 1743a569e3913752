import random

import pytest

from cache_placement import AllocationState, evaluate
from cache_placement.evaluation import cache_summary, endpoint_summary

from tests.conftest import model_from


def test_empty_state_saves_nothing(example_model):
    score = evaluate(example_model, AllocationState(example_model))
    assert score.sum_latency_saved == 0
    assert score.sum_requests == 4000
    assert score.score == 0


def test_uses_fastest_cache_holding_video(example_model):
    state = AllocationState(example_model)
    state.insert(1, 3)  # 300ms link
    state.insert(2, 3)  # 200ms link
    score = evaluate(example_model, state)
    assert score.sum_latency_saved == 800 * 1500
    assert score.score == 800 * 1500 * 1000 // 4000


def test_known_example_score(example_model):
    state = AllocationState(example_model)
    state.insert(0, 2)
    state.insert(1, 3)
    state.insert(1, 1)
    state.insert(2, 0)
    state.insert(2, 1)
    assert evaluate(example_model, state).score == 462500


def test_zero_demand_scores_zero():
    m = model_from("1 1 1 1 100\n50\n1000 1\n0 100\n0 0 0\n")
    state = AllocationState(m)
    state.insert(0, 0)
    score = evaluate(m, state)
    assert score.sum_requests == 0
    assert score.score == 0
    assert score.average_saving == 0.0


def test_slow_cache_never_counts_negative():
    m = model_from("1 1 1 1 100\n50\n100 1\n0 300\n0 0 10\n")
    state = AllocationState(m)
    state.insert(0, 0)
    score = evaluate(m, state)
    assert score.sum_latency_saved == 0
    assert score.score == 0


def test_saving_grows_with_placements(random_model):
    rng = random.Random(11)
    state = AllocationState(random_model)
    last = evaluate(random_model, state).sum_latency_saved
    pairs = [(c, v) for c in range(random_model.num_caches)
             for v in range(random_model.num_videos)]
    rng.shuffle(pairs)
    for cache_id, video_id in pairs:
        if state.is_admissible(cache_id, video_id):
            state.insert(cache_id, video_id)
            saved = evaluate(random_model, state).sum_latency_saved
            assert saved >= last >= 0
            last = saved


def test_cache_summary(example_model):
    state = AllocationState(example_model)
    state.insert(0, 3)
    df = cache_summary(example_model, state)
    assert list(df['cache_id']) == [0, 1, 2]
    assert list(df['used']) == [30, 0, 0]
    assert df.loc[0, 'fill_ratio'] == pytest.approx(0.3)


def test_endpoint_summary(example_model):
    state = AllocationState(example_model)
    state.insert(0, 3)
    df = endpoint_summary(example_model, state)
    assert list(df['requests']) == [3000, 1000]
    # endpoint 0: 1500 requests at 100ms, 1500 at 1000ms
    assert df.loc[0, 'avg_latency'] == pytest.approx(550.0)
    assert df.loc[0, 'saving'] == pytest.approx(450.0)
    assert df.loc[1, 'avg_latency'] == pytest.approx(500.0)

    only_first = endpoint_summary(example_model, state, endpoint_ids=[0])
    assert len(only_first) == 1
