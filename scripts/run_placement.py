#!/usr/bin/env python3
import sys
import os
import argparse
import logging

from tqdm import tqdm

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cache_placement import InputFormatError, evaluate, load_config, load_model, write_placement
from cache_placement.optimizers import STRATEGIES, GreedyOptimizer, WorkerPool

MB = 1_048_576


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="compute a video-to-cache placement")
    parser.add_argument('input', type=str)
    parser.add_argument('--config', type=str, default=None)
    parser.add_argument('--strategy', type=str, default=None, choices=list(STRATEGIES))
    parser.add_argument('--workers', type=int, default=None)
    parser.add_argument('--chunk-size', type=int, default=None)
    parser.add_argument('--max-iterations', type=int, default=None)
    parser.add_argument('--output', type=str, default=None)
    parser.add_argument('--no-progress', action='store_true')
    parser.add_argument('--log-level', type=str, default=None)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config).update(
            strategy=args.strategy,
            workers=args.workers,
            chunk_size=args.chunk_size,
            max_iterations=args.max_iterations,
            show_progress=False if args.no_progress else None,
            log_level=args.log_level,
        )
    except (OSError, ValueError) as e:
        print(f"error: bad configuration: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(level=getattr(logging, config.log_level, logging.WARNING),
                        format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    try:
        model = load_model(args.input)
    except (OSError, InputFormatError) as e:
        print(f"error: cannot load {args.input}: {e}", file=sys.stderr)
        return 1

    # progress in bytes, sizes in the input are megabytes
    bar = tqdm(total=model.total_capacity * MB, unit='B', unit_scale=True,
               disable=not config.show_progress, file=sys.stderr)

    with WorkerPool(workers=config.workers, chunk_size=config.chunk_size) as pool:
        optimizer = GreedyOptimizer(
            model,
            config.strategy,
            pool=pool,
            max_iterations=config.max_iterations,
            progress=lambda size: bar.update(size * MB),
        )
        result = optimizer.run()
    bar.close()

    score = evaluate(model, result.state)
    print(f"\nTime: {result.elapsed:.1f}s\nScore: {score.score}", file=sys.stderr)

    write_placement(result.state, args.output)
    return 0


if __name__ == '__main__':
    sys.exit(main())
