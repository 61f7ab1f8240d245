"""
CPU reference backend for the calibrated tests.

Dispatches to family-specific submodules based on design.test_type.
"""

from __future__ import annotations

import logging

from pyrobustest.core.result import Result
from pyrobustest.core.compute.timing import Timer
from pyrobustest.hypothesis._common import CalibratedParams
from pyrobustest.hypothesis._pairwise import PairwiseComparator
from pyrobustest.hypothesis._pvalue import PValueCalculator
from pyrobustest.hypothesis._reference import ReferenceTable
from pyrobustest.hypothesis.design import CalibratedDesign

logger = logging.getLogger(__name__)


class CPUCalibratedBackend:
    """
    CPU reference backend.

    Args:
        reference_table: Pearson reference distribution injected into the
            p-value calculator; None uses the process-wide default.
    """

    def __init__(self, reference_table: ReferenceTable | None = None):
        self._calculator = PValueCalculator(reference_table)
        self._comparator = self._make_comparator()

    def _make_comparator(self) -> PairwiseComparator:
        return PairwiseComparator()

    @property
    def name(self) -> str:
        return 'cpu_calibrated'

    def solve(self, design: CalibratedDesign) -> Result[CalibratedParams]:
        """Dispatch to test-specific implementation based on design.test_type."""
        timer = self._make_timer()
        timer.start()

        test_type = design.test_type
        logger.debug("%s: solving %r", self.name, design)

        with timer.section(test_type):
            if test_type == "rank_sum":
                from pyrobustest.hypothesis.backends._rank_test import rank_sum
                params, warnings_list = rank_sum(design, self._comparator)
            elif test_type == "signed_rank":
                from pyrobustest.hypothesis.backends._rank_test import signed_rank
                params, warnings_list = signed_rank(design, self._comparator)
            elif test_type == "pearson":
                from pyrobustest.hypothesis.backends._cor_test import pearson
                params, warnings_list = pearson(design, self._calculator)
            elif test_type == "kendall":
                from pyrobustest.hypothesis.backends._cor_test import kendall
                params, warnings_list = kendall(design, self._comparator)
            elif test_type == "spearman":
                from pyrobustest.hypothesis.backends._cor_test import spearman
                params, warnings_list = spearman(design, self._comparator)
            elif test_type == "var_two_sample":
                from pyrobustest.hypothesis.backends._var_test import var_two_sample
                params, warnings_list = var_two_sample(design)
            elif test_type == "var_k_sample":
                from pyrobustest.hypothesis.backends._var_test import var_k_sample
                params, warnings_list = var_k_sample(design)
            else:
                raise ValueError(f"Unknown test_type: {test_type!r}")

        timer.stop()

        return Result(
            params=params,
            info={
                'test_type': test_type,
                'n_observations': design.n_observations,
                'comparator': self._comparator.name,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )

    def _make_timer(self) -> Timer:
        return Timer()
