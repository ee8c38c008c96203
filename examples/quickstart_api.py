#!/usr/bin/env python3
"""Quickstart example using the high-level decompose/progressive API.

This example demonstrates the simplest way to use the package:
- Generate a test signal (or take the scikit-image camera image)
- Decompose it into Haar coefficients with decompose()
- Rebuild it from growing coefficient prefixes with progressive()
- Report how fast the error falls as basis vectors are added
"""

from __future__ import annotations

import argparse

import numpy as np

from haarlab import decompose, progressive, recompose
from haarlab.eval import energy_by_level
from haarlab.utils.logging import configure_logging


def _load_image(size: int) -> np.ndarray:
    from skimage import data
    from skimage.transform import resize

    camera = data.camera().astype(np.float64) / 255.0
    return resize(camera, (size, size), anti_aliasing=True)


def main() -> None:
    parser = argparse.ArgumentParser(description="Quickstart API example")
    parser.add_argument("--size", type=int, default=64, help="Signal length (power of two)")
    parser.add_argument(
        "--image",
        action="store_true",
        help="Use the camera test image resized to size x size",
    )
    parser.add_argument(
        "--strategy",
        choices=["incremental", "independent"],
        default=None,
        help="Reconstruction strategy (configured default if omitted)",
    )
    parser.add_argument("--workers", type=int, default=None, help="Threads for 'independent'")
    parser.add_argument("--config", default=None, help="Path to haarlab.toml")
    parser.add_argument("--log-level", default=None, help="Logging level (configured default)")
    args = parser.parse_args()

    configure_logging(args.log_level)

    if args.image:
        x = _load_image(args.size)
        print(f"Camera image resized to {x.shape}")
    else:
        t = np.linspace(0.0, 1.0, args.size, endpoint=False)
        x = np.sin(2 * np.pi * 3 * t) + 0.5 * (t > 0.5)
        print(f"Synthetic signal of length {x.shape[0]}")

    c = decompose(x, separable=args.image)
    assert np.allclose(recompose(c, separable=args.image), x)

    if not args.image:
        energy = energy_by_level(c)
        print("Energy by level (scaling, coarse -> fine details):")
        print("  " + " ".join(f"{e:.3f}" for e in energy))

    seq = progressive(
        x,
        strategy=args.strategy,
        workers=args.workers,
        separable=args.image,
        config_path=args.config,
    )
    print(f"{seq}")

    for k in seq.ks:
        # powers of two only, to keep the table short
        if k & (k - 1):
            continue
        err = float(np.linalg.norm(x - seq.at(k)))
        print(f"  k={k:5d}  ||x - recon_k|| = {err:.6f}")


if __name__ == "__main__":
    main()
