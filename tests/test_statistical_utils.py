import numpy as np
import pandas as pd
import pytest

from statistical_utils import (
    _pick_hdi_columns,
    _summarize_draws,
    directional_probability,
    interaction_contrast,
    paired_difference,
    summarize_contrast,
)


def test_paired_difference_is_per_draw():
    a = np.array([1.0, 2.0, 3.0])
    b = np.array([0.5, 2.5, 1.0])
    assert np.allclose(paired_difference(a, b), [0.5, -0.5, 2.0])


def test_paired_difference_rejects_unequal_lengths():
    with pytest.raises(ValueError):
        paired_difference(np.zeros(3), np.zeros(4))


def test_interaction_contrast():
    out = interaction_contrast(np.array([4.0]), np.array([1.0]), np.array([3.0]), np.array([2.0]))
    assert out[0] == pytest.approx(2.0)


def test_directional_probabilities_partition_draws():
    delta = np.array([-2.0, -1.0, 0.0, 1.0, 2.0, 3.0])
    assert directional_probability(delta, "<") == pytest.approx(2 / 6)
    assert directional_probability(delta, ">") == pytest.approx(3 / 6)
    s = summarize_contrast(delta, hdi_prob=0.95)
    assert s["Pr(>0)"] + s["Pr(<0)"] + s["Pr(=0)"] == pytest.approx(1.0)


def test_directional_probability_rejects_unknown_direction():
    with pytest.raises(ValueError):
        directional_probability(np.zeros(3), ">=")


def test_summaries_round_but_draws_do_not_change():
    draws = np.array([0.123456, 0.234567, 0.345678])
    copy = draws.copy()
    s = _summarize_draws(draws, hdi_prob=0.95)
    assert s["median"] == 0.23
    assert np.array_equal(draws, copy)
    assert _summarize_draws(draws, 0.95, digits=None)["median"] == pytest.approx(0.234567)


def test_pick_hdi_columns():
    df = pd.DataFrame(columns=["mean", "sd", "hdi_97.5%", "hdi_2.5%"])
    assert _pick_hdi_columns(df) == ("hdi_2.5%", "hdi_97.5%")
    with pytest.raises(ValueError):
        _pick_hdi_columns(pd.DataFrame(columns=["mean"]))
