import importlib.util
from pathlib import Path

import pytest

from cache_placement import parse_placement

SCRIPTS = Path(__file__).resolve().parents[1] / "scripts"


def load_script(name):
    spec = importlib.util.spec_from_file_location(name, SCRIPTS / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture(scope="module")
def run_placement():
    return load_script("run_placement")


def test_run_placement_prints_plan(run_placement, example_file, capsys):
    assert run_placement.main([str(example_file), '--strategy', 'basic', '--no-progress']) == 0
    captured = capsys.readouterr()
    assert parse_placement(captured.out) == {0: {1, 3}, 1: set(), 2: set()}
    assert "Score: 562500" in captured.err


def test_run_placement_writes_file(run_placement, example_file, tmp_path, capsys):
    out = tmp_path / "plan.out"
    code = run_placement.main([str(example_file), '--output', str(out), '--no-progress',
                               '--workers', '2'])
    assert code == 0
    assert len(parse_placement(out.read_text())) == 3


def test_run_placement_load_error(run_placement, tmp_path, capsys):
    bad = tmp_path / "bad.in"
    bad.write_text("1 1 1 1\n")
    assert run_placement.main([str(bad), '--no-progress']) == 1
    assert "error" in capsys.readouterr().err

    assert run_placement.main([str(tmp_path / "missing.in"), '--no-progress']) == 1

    binary = tmp_path / "binary.in"
    binary.write_bytes(b"1 1 1 1 10\n\xff\xfe\n")
    assert run_placement.main([str(binary), '--no-progress']) == 1
    assert "not valid text" in capsys.readouterr().err


def test_run_placement_bad_config(run_placement, example_file, tmp_path, capsys):
    config = tmp_path / "bad.yaml"
    config.write_text("threads: 3\n")
    assert run_placement.main([str(example_file), '--config', str(config)]) == 2

    for text in ("strategy: 5\n", "log_level: null\n"):
        config.write_text(text)
        assert run_placement.main([str(example_file), '--config', str(config)]) == 2


def test_benchmark_strategies(example_file, tmp_path, capsys):
    benchmark = load_script("benchmark_strategies")
    csv = tmp_path / "results.csv"
    results = benchmark.main([str(example_file), '--csv', str(csv), '--quiet'])
    assert [name for name, _ in results] == ['basic', 'advanced', 'rescoring']
    assert all(m['score'] == 562500 for _, m in results)
    assert csv.exists()
    assert "best:" in capsys.readouterr().out


def test_placement_analysis_writes_plots(example_file, tmp_path):
    analysis = load_script("placement_analysis")
    out = tmp_path / "analysis"
    analysis.analyze_placement(str(example_file), strategy='basic', workers=1,
                               output_dir=str(out))
    for name in ('cache_fill_basic.png', 'endpoint_latency_basic.png',
                 'caches_basic.csv', 'endpoints_basic.csv'):
        assert (out / name).exists()
