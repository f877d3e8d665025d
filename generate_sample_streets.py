#!/usr/bin/env python3
"""
Generate a small sample street network.

Builds a wavy main street, grows slanted side streets from random
points along it, refines every path and writes the result as JSON.

Usage:
    python generate_sample_streets.py [--seed SEED] [--output FILE] [--plot FILE]
"""

import argparse
import json
import sys

import structlog

from pcity_mapgen import Path, Point, network_length, network_paths, network_to_dict, reset_context
from pcity_mapgen.config import settings
from pcity_mapgen.logging_config import configure_logging

logger = structlog.get_logger()


def build_network(seed, size=400, side_streets=4, segment_length=20):
    """Build the sample network and return its root path plus all branches."""
    context = reset_context(seed)
    prng = context.prng

    main = Path(Point((0, 0, size / 2)), Point((size, 0, size / 2)))
    main.make_wave(segment_count=16, amplitude=size / 20, density=1.5)

    branches = []
    for _ in range(side_streets):
        root = main.random_intermediate_point()
        if root is None or root.has_branches():
            continue
        side = prng.choice((1, -1))
        finish = Point((root.x + prng.randint(20, size // 4), root.y,
                        root.z + side * prng.randint(size // 8, size // 3)))
        branch = root.branch(finish)
        branch.make_slanted(segment_length)
        branches.append(branch)

    main.subdivide(segment_length)
    main.unsubdivide(0.05)
    return main, branches


def plot_network(root, output):
    """Plot the network in the x/z plane with matplotlib."""
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(figsize=(8, 8))
    for pth in network_paths(root):
        positions = pth.all_positions()
        ax.plot(positions[:, 0], positions[:, 2], marker=".", linewidth=2)
    ax.set_aspect("equal")
    ax.set_xlabel("x")
    ax.set_ylabel("z")
    ax.set_title("Sample street network")
    fig.savefig(output, dpi=120, bbox_inches="tight")
    plt.close(fig)


def main():
    parser = argparse.ArgumentParser(description="Generate a sample street network")
    parser.add_argument("--seed", default=settings.seed, help="Seed string")
    parser.add_argument("-o", "--output", default=None,
                        help="Output JSON file (default: print to stdout)")
    parser.add_argument("--plot", default=None, help="Write a PNG plot to this file")
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation")
    args = parser.parse_args()

    configure_logging(settings.log_level, settings.log_format)

    # Branch paths are only weakly held by their root points
    main_street, branches = build_network(args.seed)
    logger.info("Street network generated", seed=args.seed,
                paths=len(network_paths(main_street)), side_streets=len(branches),
                length=round(network_length(main_street), 2))

    json_str = json.dumps(network_to_dict(main_street), indent=args.indent)
    if args.output:
        with open(args.output, "w") as f:
            f.write(json_str)
        logger.info("Network exported", output=args.output)
    else:
        print(json_str)

    if args.plot:
        plot_network(main_street, args.plot)
        logger.info("Network plotted", output=args.plot)


if __name__ == "__main__":
    sys.exit(main())
