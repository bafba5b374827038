"""Command-line interface."""
import argparse
import logging
import random
import sys
from collections import Counter
from typing import Optional

from meshsample.config import DEFAULT_SAMPLE_COUNT, DEFAULT_SEED
from meshsample.logging_config import setup_logging
from meshsample.model.surface import SurfaceModel
from meshsample.sampling.sampler import Sampler

logger = logging.getLogger("meshsample.cli")

# Non-regular tetrahedron, faces oriented outwards
TETRAHEDRON_VERTICES = [
    (0.0, 0.0, 0.0),
    (1.0, 0.0, 0.0),
    (0.0, 1.0, 0.0),
    (0.0, 0.0, 1.0),
]
TETRAHEDRON_FACES = [(1, 0, 2), (2, 0, 3), (0, 1, 3), (1, 2, 3)]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meshsample",
        description="Sample a reference tetrahedron and compare face frequencies with area fractions.",
    )
    parser.add_argument('-n', '--count', type=int, default=DEFAULT_SAMPLE_COUNT, help="Number of samples")
    parser.add_argument('--seed', type=int, default=DEFAULT_SEED, help="Seed for random.Random")
    parser.add_argument('-v', '--verbose', action='store_true', help="Enable debug logging")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    if args.count <= 0:
        logger.error(f"Sample count must be positive, got {args.count}.")
        return 2

    model = SurfaceModel(TETRAHEDRON_VERTICES, TETRAHEDRON_FACES)
    sampler = Sampler(model)
    rng = random.Random(args.seed)

    logger.info(f"Drawing {args.count} samples from {model!r}")
    counts = Counter(sample.face_index for sample in sampler.sample_many(rng, args.count))

    print(f"{'face':>4}  {'area':>8}  {'expected':>8}  {'observed':>8}")
    for face_index, (area, expected) in enumerate(zip(model.face_areas, model.face_probabilities)):
        observed = counts[face_index] / args.count
        print(f"{face_index:>4}  {area:>8.4f}  {expected:>8.4f}  {observed:>8.4f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
