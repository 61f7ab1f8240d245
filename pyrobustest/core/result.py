"""
Generic result container for every calibrated test.

Each test family defines its own frozen parameter payload; Result wraps it
together with metadata, timing and the non-fatal warnings raised while
computing it.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict carries the family discriminator ('test_type')
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True): a result is created once and never mutated
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope.

    Type Parameters:
        P: The family-specific parameter payload type

    Attributes:
        params: Family-specific payload (statistic, p-value, estimate, ...)
        info: Structured metadata, always including 'test_type'
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation

    Examples:
        >>> Result(
        ...     params=RankSumParams(...),
        ...     info={'test_type': 'rank_sum', 'n_x': 10, 'n_y': 12},
        ...     timing={'total_seconds': 0.002, 'rank_sum': 0.0018},
        ...     backend_name='cpu_calibrated',
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
