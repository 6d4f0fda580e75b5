"""Time dense matrix products.

Builds two size x size matrices (row values ``(250 - c) / 10`` and
``(250 - c) / -10``), times one product and then ``--repeat`` more.
"""
from __future__ import annotations

import argparse
import time

import densemat


def build_operands(size: int) -> tuple[densemat.Matrix, densemat.Matrix]:
    left_row = [(250.0 - col) / 10 for col in range(size)]
    right_row = [(250.0 - col) / -10 for col in range(size)]
    left = densemat.Matrix.from_rows([left_row] * size)
    right = densemat.Matrix.from_rows([right_row] * size)
    return left, right


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark densemat matrix multiplication")
    parser.add_argument("--size", type=int, default=512, help="Matrix dimension (default: 512)")
    parser.add_argument("--repeat", type=int, default=10, help="Timed repetitions after the first product")
    parser.add_argument(
        "--kernel",
        choices=("numpy", "python"),
        default=None,
        help="Arithmetic kernel (default: DENSEMAT_KERNEL or numpy)",
    )
    args = parser.parse_args()

    if args.kernel is not None:
        densemat.set_kernel(args.kernel)

    left, right = build_operands(args.size)
    print(f"Kernel: {densemat.get_kernel()}, shape: {left.shape} x {right.shape}")

    start = time.perf_counter()
    result = left * right
    print(f"Multiplied in {(time.perf_counter() - start) * 1000:.3f} ms.")

    start = time.perf_counter()
    for _ in range(args.repeat):
        result = left * right
    print(f"Executed {args.repeat} products in: {(time.perf_counter() - start) * 1000:.3f} ms.")
    print(f"result[0, 0] = {result[0, 0]:g}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
