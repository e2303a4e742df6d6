from enum import Enum
from typing import Tuple


class Strategy(str, Enum):
    """
    User-facing activation mode. Compresses the document's
    'constant' and 'vectorized' flags into one choice.
    """
    NORMAL = 'normal'
    CONSTANT = 'constant'
    VECTORIZED = 'vectorized'


def to_flags(strategy: Strategy) -> Tuple[bool, bool]:
    """Returns the (constant, vectorized) pair written to the document."""
    strategy = Strategy(strategy)
    return (strategy in (Strategy.CONSTANT, Strategy.VECTORIZED), strategy == Strategy.VECTORIZED)

def to_strategy(constant: bool, vectorized: bool) -> Strategy:
    """
    Resolves the flag pair read from a document. 'vectorized' wins over
    'constant', which settles the (True, True) pair legacy files carry.
    """
    if vectorized:
        return Strategy.VECTORIZED
    if constant:
        return Strategy.CONSTANT
    return Strategy.NORMAL
