"""
Integer math helpers for the reserve pair engine.

Exact integer arithmetic only; results are consensus-critical.
"""


def isqrt(n: int) -> int:
    """
    Floored integer square root: largest r with r * r <= n.

    Babylonian iteration on integers; the estimate decreases monotonically
    from n and stops as soon as it no longer decreases.
    """
    if n < 0:
        raise ValueError(f"isqrt undefined for negative input: {n}")
    if n < 2:
        return n
    x = n
    y = (x + 1) // 2
    while y < x:
        x = y
        y = (x + n // x) // 2
    return x


def min_int(a: int, b: int) -> int:
    return a if a < b else b
