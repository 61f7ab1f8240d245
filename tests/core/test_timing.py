"""
Tests for the backend section timer.
"""

import pytest

from pyrobustest.core.compute.timing import Timer


class TestTimer:

    def test_sections_accumulate(self):
        timer = Timer()
        timer.start()
        with timer.section("kendall"):
            pass
        with timer.section("kendall"):
            pass
        timer.stop()
        result = timer.result()
        assert set(result) == {"total_seconds", "kendall"}
        assert result["kendall"] >= 0.0

    def test_section_recorded_on_error(self):
        timer = Timer()
        timer.start()
        with pytest.raises(ValueError):
            with timer.section("pearson"):
                raise ValueError("boom")
        timer.stop()
        assert "pearson" in timer.result()

    def test_result_before_stop(self):
        timer = Timer()
        timer.start()
        with pytest.raises(RuntimeError, match="before stop"):
            timer.result()

    def test_stop_before_start(self):
        with pytest.raises(RuntimeError, match="before start"):
            Timer().stop()
