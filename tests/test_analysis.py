import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pytest

from sudomines.analysis import (
    TECHNIQUES,
    format_grid_values,
    run_generation_many_tests,
    run_generation_single_test,
    run_size_sweep_analysis,
    summarize_technique_mix,
)


def test_format_grid_values(tutorial_grid):
    tutorial_grid[0][0].revealed = True
    tutorial_grid[0][1].revealed = True
    tutorial_grid[0][1].is_flag = True

    text = format_grid_values(tutorial_grid, show_coords=False)

    lines = text.splitlines()
    assert len(lines) == 4
    assert lines[0].split() == ["2", "F", ".", "."]
    assert lines[1].split() == [".", ".", ".", "."]


def test_format_grid_values_with_coords(tutorial_grid):
    lines = format_grid_values(tutorial_grid).splitlines()

    assert len(lines) == 6
    assert lines[0].split() == ["0", "1", "2", "3"]


def test_single_test_metrics():
    out = run_generation_single_test(4)

    assert out["size"] == 4
    assert out["valid_solution"] is True
    assert out["logically_solvable"] is True
    assert out["status"] == 1
    assert 0 < out["revealed_percentage"] < 100
    for technique in TECHNIQUES:
        assert f"{technique}_count" in out


def test_many_tests_averages():
    out = run_generation_many_tests(4, runs=3)

    assert out["valid_rate"] == 1.0
    assert out["solvable_rate"] == 1.0
    assert out["win_rate"] == 1.0
    assert out["max_elapsed"] >= out["avg_elapsed"] > 0
    for technique in TECHNIQUES:
        assert out[f"avg_{technique}_count"] >= 0


def test_many_tests_rejects_zero_runs():
    with pytest.raises(ValueError):
        run_generation_many_tests(4, runs=0)


def test_size_sweep_without_display():
    results = run_size_sweep_analysis([4, 5], runs=1, show=False)
    plt.close("all")

    assert set(results) == {4, 5}
    assert results[5]["valid_rate"] == 1.0


def test_summarize_technique_mix():
    results = {
        6: {
            "avg_naked_singles_count": 6.0,
            "avg_hidden_singles_count": 2.0,
            "avg_naked_pairs_count": 2.0,
            "avg_pointing_pairs_count": 0.0,
        }
    }

    mix = summarize_technique_mix(results, 6)

    assert mix["total_applications"] == 10.0
    assert mix["naked_singles_frac"] == pytest.approx(0.6)
    assert mix["pointing_pairs_frac"] == 0.0


def test_summarize_technique_mix_errors():
    with pytest.raises(KeyError):
        summarize_technique_mix({}, 4)
    with pytest.raises(ZeroDivisionError):
        summarize_technique_mix(
            {4: {f"avg_{t}_count": 0.0 for t in TECHNIQUES}}, 4
        )
