import os
import sys
import argparse

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cache_placement import evaluate, load_model
from cache_placement.evaluation import cache_summary, endpoint_summary
from cache_placement.optimizers import STRATEGIES, optimize


def analyze_placement(input_path, strategy='advanced', workers=4, output_dir='plots/placement_analysis'):
    print(f"Analyzing {strategy} placement for {input_path}")

    model = load_model(input_path)
    result = optimize(model, strategy, workers=workers)
    score = evaluate(model, result.state)
    print(f"score: {score.score}, saved: {score.sum_latency_saved}, time: {result.elapsed:.1f}s")

    caches = cache_summary(model, result.state)
    endpoints = endpoint_summary(model, result.state)

    os.makedirs(output_dir, exist_ok=True)
    plt.rcParams.update({'font.size': 12, 'axes.titlesize': 14, 'axes.labelsize': 12})

    plt.figure(figsize=(10, 6))
    plt.bar(caches['cache_id'], caches['fill_ratio'] * 100, color='#1f77b4')
    plt.axhline(100, color='#d62728', linestyle='--', linewidth=1)
    plt.title(f'Cache Fill ({strategy})')
    plt.xlabel('Cache')
    plt.ylabel('Used capacity (%)')
    plt.tight_layout()
    plt.savefig(os.path.join(output_dir, f'cache_fill_{strategy}.png'), dpi=150)
    plt.close()

    active = endpoints[endpoints['requests'] > 0]
    x = np.arange(len(active))
    plt.figure(figsize=(10, 6))
    plt.bar(x - 0.2, active['datacenter_latency'], width=0.4, label='Datacenter', color='#ff7f0e')
    plt.bar(x + 0.2, active['avg_latency'], width=0.4, label='With caches', color='#2ca02c')
    plt.xticks(x, active['endpoint_id'])
    plt.title('Request-weighted Latency per Endpoint')
    plt.xlabel('Endpoint')
    plt.ylabel('Latency (ms)')
    plt.legend()
    plt.tight_layout()
    plt.savefig(os.path.join(output_dir, f'endpoint_latency_{strategy}.png'), dpi=150)
    plt.close()

    caches.to_csv(os.path.join(output_dir, f'caches_{strategy}.csv'), index=False)
    endpoints.to_csv(os.path.join(output_dir, f'endpoints_{strategy}.csv'), index=False)
    print(f"Saved plots to {output_dir}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument('input', type=str)
    parser.add_argument('--strategy', type=str, default='advanced', choices=list(STRATEGIES))
    parser.add_argument('--workers', type=int, default=4)
    parser.add_argument('--output-dir', type=str, default='plots/placement_analysis')
    args = parser.parse_args()
    analyze_placement(args.input, args.strategy, args.workers, args.output_dir)
