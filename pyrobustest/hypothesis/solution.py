"""
Calibrated test solution type.

CalibratedTestSolution wraps Result[P] for any of the closed set of
family payloads and provides the printed report via summary().
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import NDArray

from pyrobustest.core.result import Result
from pyrobustest.hypothesis._common import (
    CalibratedParams, RankSumParams, SignedRankParams, PearsonParams,
    KendallParams, SpearmanParams, VarianceParams, KSampleVarianceParams,
)

if TYPE_CHECKING:
    from pyrobustest.hypothesis.design import CalibratedDesign


METHOD_NAMES = {
    "rank_sum": "Corrected Wilcoxon rank sum test",
    "signed_rank": "Corrected Wilcoxon signed rank test",
    "pearson": "Corrected Pearson correlation test",
    "kendall": "Corrected Kendall correlation test",
    "spearman": "Corrected Spearman correlation test",
    "var_two_sample": "Corrected F test to compare two variances",
    "var_k_sample": "Corrected F test to compare variances",
}


@dataclass
class CalibratedTestSolution:
    """
    User-facing calibrated test results.

    Fields a family does not define (e.g. conf_int for Spearman, estimate
    for the k-sample variance test) are reported as None.
    """
    _result: Result[CalibratedParams]
    _design: 'CalibratedDesign | None'

    # --- Common fields ---

    @property
    def params(self) -> CalibratedParams:
        """The family-specific payload."""
        return self._result.params

    @property
    def test_type(self) -> str:
        return self._result.info['test_type']

    @property
    def method(self) -> str:
        return METHOD_NAMES[self.test_type]

    @property
    def statistic(self) -> float:
        return self._result.params.statistic

    @property
    def p_value(self) -> float:
        return self._result.params.p_value

    @property
    def alternative(self) -> str | None:
        return getattr(self._result.params, 'alternative', None)

    @property
    def estimate(self) -> float | dict[str, float] | None:
        """Point estimate: P(X < Y), P(D1 + D2 > 0), r, tau, rho, or group variances."""
        return getattr(self._result.params, 'estimate', None)

    @property
    def conf_int(self) -> NDArray[np.floating[Any]] | None:
        return getattr(self._result.params, 'conf_int', None)

    @property
    def conf_level(self) -> float | None:
        return getattr(self._result.params, 'conf_level', None)

    @property
    def ties_broken(self) -> bool:
        """True if tied values were randomly perturbed."""
        return bool(getattr(self._result.params, 'ties_broken', False))

    @property
    def df(self) -> float | tuple[float, float] | None:
        return getattr(self._result.params, 'df', None)

    @property
    def data_name(self) -> str:
        return self._design.data_name if self._design is not None else ""

    # --- Metadata ---

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Formatting ---

    def summary(self) -> str:
        """
        Format the result as a short report, e.g.:

            Corrected Kendall correlation test

        data:  x and y
        t = 2.1345, p-value = 0.0328
        alternative hypothesis: true tau is not equal to 0
        95 % asymptotic confidence interval:
         0.0213  0.4978
        sample estimates:
                   tau
             0.2595556
        """
        p = self._result.params
        lines = [f"\t{self.method}", ""]
        if self.data_name:
            lines.append(f"data:  {self.data_name}")

        if isinstance(p, (RankSumParams, SignedRankParams)):
            lines.append(_stat_line("W", p.statistic, p.p_value))
            subject = "median (X-Y)" if isinstance(p, RankSumParams) else "median (D1+D2)"
            lines.append("alternative hypothesis: " + {
                "two-sided": f"{subject} is not equal to zero",
                "less": f"{subject} is negative",
                "greater": f"{subject} is positive",
            }[p.alternative])
            label = "P(X<Y)" if isinstance(p, RankSumParams) else "P(D1+D2>0)"
            lines.extend(_estimates({label: p.estimate}))

        elif isinstance(p, (PearsonParams, KendallParams, SpearmanParams)):
            name = {PearsonParams: "cor", KendallParams: "tau",
                    SpearmanParams: "rho"}[type(p)]
            subject = "correlation" if name == "cor" else name
            stat_name = "S" if isinstance(p, SpearmanParams) else "t"
            lines.append(_stat_line(stat_name, p.statistic, p.p_value))
            lines.append(_alternative_line(f"true {subject}", p.alternative, 0.0))
            if isinstance(p, PearsonParams):
                lines.append(
                    f"{_pct(p.conf_level)} % asymptotic confidence interval "
                    "for the correlation coefficient:"
                )
                lines.append(_interval(p.conf_int))
            elif isinstance(p, KendallParams):
                lines.append(f"{_pct(p.conf_level)} % asymptotic confidence interval:")
                lines.append(_interval(p.conf_int))
            lines.extend(_estimates({name: p.estimate}))

        elif isinstance(p, VarianceParams):
            lines.append(
                f"t = {p.statistic:.4f}, df = {p.df:.5g}, "
                f"p-value = {_format_pvalue(p.p_value)}"
            )
            lines.append(_alternative_line(
                "true difference of variances", p.alternative, 0.0,
            ))
            lines.append(f"{_pct(p.conf_level)} percent confidence interval:")
            lines.append(_interval(p.conf_int))
            lines.extend(_estimates(p.estimate))

        elif isinstance(p, KSampleVarianceParams):
            lines.append(
                f"F = {p.statistic:.4f}, num df = {p.df[0]:.5g}, "
                f"denom df = {p.df[1]:.5g}, p-value = {_format_pvalue(p.p_value)}"
            )
            lines.append("alternative hypothesis: all the variances are not equal")

        if self.ties_broken:
            lines.append("")
            lines.append("Ties were detected in the dataset and they were randomly broken")

        lines.append("")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"CalibratedTestSolution(method={self.method!r}, "
            f"statistic={self.statistic:.4g}, p_value={self.p_value:.4g})"
        )


def _format_pvalue(p: float) -> str:
    if p < 1e-4:
        return "< 1e-4"
    return f"{p:.4g}"


def _stat_line(name: str, statistic: float, p_value: float) -> str:
    return f"{name} = {statistic:.4f}, p-value = {_format_pvalue(p_value)}"


def _alternative_line(subject: str, alternative: str, null: float) -> str:
    relation = {
        "two-sided": "is not equal to",
        "less": "is less than",
        "greater": "is greater than",
    }[alternative]
    return f"alternative hypothesis: {subject} {relation} {null:g}"


def _pct(conf_level: float) -> str:
    return f"{conf_level * 100:g}"


def _format_number(x: float) -> str:
    """Format a number, handling infinity."""
    if np.isinf(x):
        return "-Inf" if x < 0 else "Inf"
    return f"{x:.4f}"


def _interval(ci: NDArray[np.floating[Any]]) -> str:
    lo, hi = ci
    return f" {_format_number(lo)}  {_format_number(hi)}"


def _estimates(values: dict[str, float]) -> list[str]:
    names = list(values.keys())
    vals = list(values.values())
    return [
        "sample estimates:",
        " ".join(f"{n:>14s}" for n in names),
        " ".join(f"{v:14.7g}" for v in vals),
    ]
