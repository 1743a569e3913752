#!/usr/bin/env python3
import sys
import os
import argparse
from typing import Dict, List, Tuple

import pandas as pd

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cache_placement import evaluate, load_model
from cache_placement.optimizers import STRATEGIES, GreedyOptimizer, WorkerPool


def run_strategy(model, name, pool, verbose=True) -> Dict:
    if verbose:
        print(f"running {name}...")

    result = GreedyOptimizer(model, name, pool=pool).run()
    score = evaluate(model, result.state)

    metrics = {
        'score': score.score,
        'latency_saved': score.sum_latency_saved,
        'placements': len(result.state),
        'used': result.state.used_capacity / max(1, model.total_capacity),
        'iterations': result.iterations,
        'elapsed_time': result.elapsed,
    }
    if verbose:
        print(f"  score {score.score}, {metrics['placements']} placements, {result.elapsed:.1f}s")
    return metrics


def print_results(results: List[Tuple[str, Dict]]):
    print(f"\n{'strategy':<12} {'score':>12} {'placed':>8} {'used':>8} {'time':>8}")
    print("-" * 52)

    for name, m in results:
        print(f"{name:<12} {m['score']:>12} {m['placements']:>8} {m['used']:>7.1%} {m['elapsed_time']:>7.1f}s")

    best = max(results, key=lambda x: x[1]['score'])
    print(f"\nbest: {best[0]} ({best[1]['score']})")


def main(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument('input', type=str)
    parser.add_argument('--strategies', nargs='+', default=list(STRATEGIES),
                        choices=list(STRATEGIES))
    parser.add_argument('--workers', type=int, default=4)
    parser.add_argument('--csv', type=str, default=None)
    parser.add_argument('--quiet', action='store_true')
    args = parser.parse_args(argv)

    model = load_model(args.input)
    print(f"{model.num_videos} videos, {model.num_endpoints} endpoints, "
          f"{len(model.requests)} demand entries, {model.num_caches} caches of {model.cache_capacity}mb")

    results = []
    with WorkerPool(workers=args.workers) as pool:
        for name in args.strategies:
            results.append((name, run_strategy(model, name, pool, not args.quiet)))

    print_results(results)

    if args.csv:
        df = pd.DataFrame([{'strategy': name, **m} for name, m in results])
        df.to_csv(args.csv, index=False)
        print(f"saved {args.csv}")
    return results


if __name__ == '__main__':
    main()
