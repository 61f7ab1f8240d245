"""
p-values for the studentized statistics.

All statistics except Pearson's are referred to the standard normal.
Pearson's statistic uses the tabulated small-sample null distribution for
n <= 129 and Student t with n - 2 degrees of freedom above that.
"""

from __future__ import annotations

from scipy import stats as sp_stats

from pyrobustest.hypothesis._reference import ReferenceTable, default_reference_table


def _clip(p: float) -> float:
    return float(min(max(p, 0.0), 1.0))


def normal_pvalue(statistic: float, alternative: str) -> float:
    """p-value of a statistic that is standard normal under the null."""
    if alternative == "two-sided":
        p = 2.0 * sp_stats.norm.sf(abs(statistic))
    elif alternative == "less":
        p = sp_stats.norm.cdf(statistic)
    else:  # greater
        p = sp_stats.norm.sf(statistic)
    return _clip(p)


def student_pvalue(statistic: float, df: float, alternative: str) -> float:
    """p-value from the t distribution."""
    if alternative == "two-sided":
        p = 2.0 * sp_stats.t.sf(abs(statistic), df)
    elif alternative == "less":
        p = sp_stats.t.cdf(statistic, df)
    else:  # greater
        p = sp_stats.t.sf(statistic, df)
    return _clip(p)


class PValueCalculator:
    """
    Maps a studentized statistic to a p-value.

    Args:
        reference_table: Pearson reference distribution. If None, the
            process-wide default_reference_table() is used on first need.
    """

    def __init__(self, reference_table: ReferenceTable | None = None):
        self._reference_table = reference_table

    @property
    def reference_table(self) -> ReferenceTable:
        if self._reference_table is None:
            self._reference_table = default_reference_table()
        return self._reference_table

    def pearson(self, statistic: float, n: int, alternative: str) -> tuple[float, str]:
        """
        p-value of the studentized Pearson statistic.

        Returns
        -------
        (p_value, method) where method is "reference table" or "student t".
        """
        if not ReferenceTable.covers(n):
            return student_pvalue(statistic, n - 2, alternative), "student t"

        table = self.reference_table
        if alternative == "two-sided":
            a = abs(statistic)
            p = 1.0 - table.cdf(n, a) + table.cdf(n, -a)
        elif alternative == "less":
            p = table.cdf(n, statistic)
        else:  # greater
            p = 1.0 - table.cdf(n, statistic)
        return _clip(p), "reference table"
