"""Tests for the discretised Weibull length-of-stay samplers."""

import numpy as np
import pytest
from scipy.stats import weibull_min

from bedflow.errors import InvalidParameter
from bedflow.los import (
    LOS_PARAMETERS,
    DiscretisedWeibull,
    get_los_distribution,
    get_los_sampler,
)


class TestDiscretisedWeibull:
    def test_pmf_sums_to_one(self):
        dist = DiscretisedWeibull(shape=2, scale=10)
        days = np.arange(1, 200)
        assert dist.pmf(days).sum() == pytest.approx(1.0)

    def test_pmf_zero_below_one_day(self):
        dist = DiscretisedWeibull(shape=2, scale=10)
        np.testing.assert_array_equal(dist.pmf([-1, 0, 1.5]), [0.0, 0.0, 0.0])

    def test_pmf_matches_cdf_differences(self):
        dist = DiscretisedWeibull(shape=2, scale=13)
        cdf = weibull_min(c=2, scale=13).cdf
        assert dist.pmf(4) == pytest.approx(cdf(4) - cdf(3))
        assert dist.pmf(1) == pytest.approx(cdf(1))

    def test_mean_is_continuous_mean_rounded_up(self):
        dist = DiscretisedWeibull(shape=2, scale=10)
        continuous_mean = weibull_min(c=2, scale=10).mean()
        assert continuous_mean < dist.mean() < continuous_mean + 1

    def test_samples_are_positive_integers(self):
        stays = DiscretisedWeibull(shape=2, scale=10).sample(1000, rng=0)
        assert stays.shape == (1000,)
        assert np.issubdtype(stays.dtype, np.integer)
        assert stays.min() >= 1

    def test_sample_zero(self):
        assert DiscretisedWeibull(shape=2, scale=10).sample(0, rng=0).shape == (0,)

    def test_seeded_samples_reproducible(self):
        dist = DiscretisedWeibull(shape=2, scale=10)
        np.testing.assert_array_equal(dist.sample(20, rng=42), dist.sample(20, rng=42))

    def test_sample_mean_close_to_pmf_mean(self):
        dist = DiscretisedWeibull(shape=2, scale=10)
        stays = dist.sample(20000, rng=1)
        assert stays.mean() == pytest.approx(dist.mean(), rel=0.03)

    def test_sampler_shares_generator(self):
        sampler = DiscretisedWeibull(shape=2, scale=10).sampler(rng=3)
        first, second = sampler(50), sampler(50)
        assert not np.array_equal(first, second)

    @pytest.mark.parametrize(
        "shape, scale", [(0, 10), (2, -1), (float("nan"), 10), (2, float("inf"))]
    )
    def test_invalid_parameters(self, shape, scale):
        with pytest.raises(InvalidParameter):
            DiscretisedWeibull(shape=shape, scale=scale)


class TestCareCategories:
    def test_default_parameters(self):
        assert LOS_PARAMETERS["critical"] == (2.0, 10.0)
        assert LOS_PARAMETERS["normal"] == (2.0, 13.0)

    def test_get_distribution(self):
        assert get_los_distribution("normal") == DiscretisedWeibull(2.0, 13.0)

    def test_normal_stays_longer_than_critical(self):
        assert get_los_distribution("normal").mean() > get_los_distribution("critical").mean()

    def test_get_sampler(self):
        stays = get_los_sampler("critical", rng=42)(5)
        assert len(stays) == 5
        assert (stays >= 1).all()

    def test_unknown_care(self):
        with pytest.raises(InvalidParameter, match="care"):
            get_los_sampler("maternity")
