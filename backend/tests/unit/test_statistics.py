"""
Unit tests for the statistical helpers.
"""

import pytest

from app.domain.scoring.interfaces import (
    DimensionDistribution,
    HistoricalDistribution,
    SchoolMetrics,
)
from app.domain.scoring.normalizer import Normalizer
from app.domain.scoring.statistics import (
    blend_with_prior,
    empirical_percentile,
    normal_cdf,
    percentile_against_school,
    percentile_from_iqr,
    school_reference_median,
    z_score,
)


def _context(**kwargs):
    kwargs.setdefault("school_id", "s1")
    kwargs.setdefault("acceptance_rate", 0.30)
    return Normalizer().normalize_school(SchoolMetrics(**kwargs))


class TestNormalHelpers:
    """Tests for the normal CDF and z-scores."""

    @pytest.mark.parametrize(
        "z,expected",
        [(0.0, 0.5), (1.0, 0.8413), (-1.0, 0.1587), (1.96, 0.9750), (-1.96, 0.0250)],
    )
    def test_normal_cdf_table(self, z, expected):
        assert normal_cdf(z) == pytest.approx(expected, abs=1e-4)

    def test_z_score(self):
        assert z_score(80, 70, 10) == pytest.approx(1.0)

    def test_z_score_rejects_zero_stdev(self):
        with pytest.raises(ValueError):
            z_score(80, 70, 0)

    def test_iqr_percentiles(self):
        assert percentile_from_iqr(1500, 1450, 1550) == pytest.approx(0.5)
        assert percentile_from_iqr(1550, 1450, 1550) == pytest.approx(0.75, abs=1e-3)
        assert percentile_from_iqr(1450, 1450, 1550) == pytest.approx(0.25, abs=1e-3)


class TestEmpiricalPercentile:
    """Tests for mid-rank percentiles."""

    def test_middle_value(self):
        values = [float(v) for v in range(1, 11)]
        assert empirical_percentile(5, values) == pytest.approx(0.45)

    def test_above_and_below_all(self):
        values = [1.0, 2.0, 3.0]
        assert empirical_percentile(10, values) == pytest.approx(1.0)
        assert empirical_percentile(0, values) == pytest.approx(0.0)

    def test_ties_count_half(self):
        assert empirical_percentile(2, [2.0, 2.0, 2.0]) == pytest.approx(0.5)

    def test_empty_sample_is_neutral(self):
        assert empirical_percentile(5, []) == pytest.approx(0.5)


class TestBlendWithPrior:
    """Tests for sample-size weighted blending."""

    def test_half_weight(self):
        observed = DimensionDistribution(mean=1400.0, stdev=80.0, sample_size=15)
        mean, stdev, weight = blend_with_prior(observed, (1340.0, 100.0), 30)
        assert weight == pytest.approx(0.5)
        assert mean == pytest.approx(1370.0)
        assert stdev == pytest.approx(90.0)

    def test_full_sample_ignores_prior(self):
        observed = DimensionDistribution(mean=1400.0, stdev=80.0, sample_size=60)
        mean, stdev, weight = blend_with_prior(observed, (1340.0, 100.0), 30)
        assert weight == pytest.approx(1.0)
        assert mean == pytest.approx(1400.0)

    def test_nothing_observed_returns_prior(self):
        assert blend_with_prior(None, (1340.0, 100.0), 30) == (1340.0, 100.0, 0.0)

    def test_single_value_has_no_summary(self):
        observed = DimensionDistribution.from_values([1500])
        assert blend_with_prior(observed, (1340.0, 100.0), 30) == (1340.0, 100.0, 0.0)


class TestPercentileAgainstSchool:
    """Tests for the data-source fallback ladder."""

    def test_empirical_with_raw_values(self, rich_school):
        context = Normalizer().normalize_school(rich_school)
        percentile, method = percentile_against_school(1500, "sat", context, 30)
        assert method == "empirical"
        assert percentile == pytest.approx(0.505)

    def test_historical_summary(self):
        context = _context(historical=HistoricalDistribution(
            sample_size=50,
            sat=DimensionDistribution(mean=1450.0, stdev=50.0, sample_size=50),
        ))
        percentile, method = percentile_against_school(1500, "sat", context, 30)
        assert method == "historical_summary"
        assert percentile == pytest.approx(normal_cdf(1.0))

    def test_published_range(self):
        context = _context(sat_25=1450, sat_75=1550)
        percentile, method = percentile_against_school(1500, "sat", context, 30)
        assert method == "published_range"
        assert percentile == pytest.approx(0.5)

    def test_prior_recentred_on_published_average(self):
        context = _context(sat_avg=1400)
        percentile, method = percentile_against_school(1400, "sat", context, 30)
        assert method == "prior"
        assert percentile == pytest.approx(0.5)

    def test_prior_only(self):
        context = _context()
        percentile, method = percentile_against_school(3.65, "gpa", context, 30)
        assert method == "prior"
        assert percentile == pytest.approx(0.5)

    def test_thin_sample_is_blended(self):
        context = _context(historical=HistoricalDistribution(
            sample_size=10,
            gpa=DimensionDistribution.from_values([3.8, 3.85, 3.9, 3.9, 3.95, 4.0, 3.7, 3.75, 3.8, 3.9]),
        ))
        _, method = percentile_against_school(3.8, "gpa", context, 30)
        assert method == "blended"

    @pytest.mark.parametrize(
        "school_kwargs",
        [
            {},
            {"sat_25": 1300, "sat_75": 1500},
            {"historical": HistoricalDistribution(
                sample_size=40,
                sat=DimensionDistribution.from_values([1300 + 5 * i for i in range(40)]),
            )},
        ],
    )
    def test_monotone_in_value(self, school_kwargs):
        context = _context(**school_kwargs)
        previous = -1.0
        for sat in range(1000, 1601, 20):
            percentile, _ = percentile_against_school(sat, "sat", context, 30)
            assert 0.0 <= percentile <= 1.0
            assert percentile >= previous, f"Percentile decreased at SAT {sat}"
            previous = percentile


class TestSchoolReferenceMedian:
    """Tests for the explainer's comparison reference."""

    def test_historical_median(self, rich_school):
        context = Normalizer().normalize_school(rich_school)
        assert school_reference_median("sat", context, 30) == pytest.approx(1499.0)

    def test_published_range_midpoint(self):
        context = _context(sat_25=1300, sat_75=1500)
        assert school_reference_median("sat", context, 30) == pytest.approx(1400.0)

    def test_published_median_gpa(self):
        context = _context(median_gpa=3.7)
        assert school_reference_median("gpa", context, 30) == pytest.approx(3.7)

    def test_no_data_returns_none(self):
        context = _context()
        assert school_reference_median("gpa", context, 30) is None
        assert school_reference_median("toefl", context, 30) is None
