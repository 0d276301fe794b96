import numpy as np
import pandas as pd
import pytest

from data_utils import (
    generate_test_data,
    load_yawn_data,
    prepare_observations,
    recode_condition,
    recode_trial,
    summarize_observations,
)


def test_raw_labels_are_recoded(data):
    assert list(data["condition"]) == [0, 0, 1, 1, 0, 0, 1, 1]
    assert list(data["trial"]) == [0, 1, 0, 1, 0, 1, 0, 1]
    assert np.allclose(data["log_secs"], np.log(data["secs"]))


def test_already_coded_columns_pass_through():
    df = pd.DataFrame({
        "ID": ["a", "b"],
        "condition": [0, 1],
        "trial": [0, 1],
        "numberYawns": [0, 2],
        "secs": [300.0, 300.0],
    })
    out = prepare_observations(df)
    assert list(out["condition"]) == [0, 1]
    assert list(out["trial"]) == [0, 1]
    assert list(out["numberYawns"]) == [0, 2]


def test_input_frame_is_not_modified(raw_data):
    before = raw_data.copy()
    prepare_observations(raw_data)
    pd.testing.assert_frame_equal(raw_data, before)


def test_third_condition_level_raises_when_strict():
    values = pd.Series(["Anti-Social", "Pro-Social", "Neutral"])
    with pytest.raises(ValueError, match="condition"):
        recode_condition(values, strict=True)


def test_third_condition_level_folds_when_lenient(capsys):
    values = pd.Series(["Anti-Social", "Pro-Social", "Neutral"])
    out = recode_condition(values, strict=False)
    assert list(out) == [0, 1, 1]
    assert "Warning" in capsys.readouterr().out


def test_third_trial_value_raises_when_strict():
    with pytest.raises(ValueError, match="trial"):
        recode_trial(pd.Series([1, 2, 3]), strict=True)


def test_trial_strings_are_coerced():
    assert list(recode_trial(pd.Series(["1", "2", "1"]))) == [0, 1, 0]


def test_missing_column_raises(raw_data):
    with pytest.raises(ValueError, match="secs"):
        prepare_observations(raw_data.drop(columns=["secs"]))


def test_non_positive_exposure_raises(raw_data):
    raw_data.loc[0, "secs"] = 0.0
    with pytest.raises(ValueError, match="positive"):
        prepare_observations(raw_data)


def test_negative_count_raises(raw_data):
    raw_data.loc[0, "numberYawns"] = -1
    with pytest.raises(ValueError, match="non-negative"):
        prepare_observations(raw_data)


def test_fractional_count_raises(raw_data):
    raw_data["numberYawns"] = raw_data["numberYawns"].astype(float)
    raw_data.loc[1, "numberYawns"] = 1.5
    with pytest.raises(ValueError):
        prepare_observations(raw_data)


def test_missing_value_raises(raw_data):
    raw_data.loc[2, "trial"] = np.nan
    with pytest.raises(ValueError, match="Missing values"):
        prepare_observations(raw_data)


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yawn_data(tmp_path / "nope.csv")


def test_load_csv_round_trip(tmp_path, raw_data):
    path = tmp_path / "yawns.csv"
    raw_data.to_csv(path, index=False)
    out = load_yawn_data(path)
    assert len(out) == len(raw_data)
    assert set(out["condition"]) == {0, 1}


def test_generate_test_data_is_valid_and_reproducible():
    a = generate_test_data(n_dogs=10, seed=3)
    b = generate_test_data(n_dogs=10, seed=3)
    pd.testing.assert_frame_equal(a, b)
    assert len(a) == 20
    out = prepare_observations(a)
    assert out["ID"].nunique() == 10
    assert (out["numberYawns"] >= 0).all()


def test_summarize_observations(data):
    summary = summarize_observations(data)
    assert len(summary) == 4
    anti_t1 = summary[(summary["condition"] == "Anti-Social") & (summary["trial"] == "Trial 1")]
    assert int(anti_t1["n_rows"].iloc[0]) == 2
    assert int(anti_t1["total_yawns"].iloc[0]) == 0
    pro_t2 = summary[(summary["condition"] == "Pro-Social") & (summary["trial"] == "Trial 2")]
    assert float(pro_t2["prop_yawned"].iloc[0]) == 0.5
    assert float(pro_t2["yawns_per_min"].iloc[0]) == round(4 / 600.0 * 60, 2)
