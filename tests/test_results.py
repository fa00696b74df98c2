import csv
import json

import pytest

from conftest import make_contrast_result, make_result
from vision_screen.config import ScreeningConfig
from vision_screen.protocols import TestType, get_protocol
from vision_screen.results import ResultsStore, default_filename
from vision_screen.simulate import run_simulated_eye
from vision_screen.staircase import Eye


@pytest.fixture
def store(rng):
    store = ResultsStore()
    protocol = get_protocol("acuity")
    store.record(run_simulated_eye(protocol, Eye.LEFT, 8, rng=rng))
    store.record(run_simulated_eye(protocol, Eye.RIGHT, 6, rng=rng))
    return store


def test_record_and_lookup(store):
    left, right = store.pair(TestType.VISUAL_ACUITY)
    assert left.levels_passed == 8
    assert right.levels_passed == 6
    assert store.get("visual_acuity", "left") is left
    assert store.get(TestType.CONTRAST_SENSITIVITY, Eye.LEFT) is None
    assert store.completed_tests() == [TestType.VISUAL_ACUITY]
    assert len(store) == 2


def test_retest_replaces_earlier_result(store):
    store.record(make_result(3, Eye.LEFT), TestType.VISUAL_ACUITY)
    assert store.get(TestType.VISUAL_ACUITY, Eye.LEFT).levels_passed == 3
    assert len(store) == 2


def test_record_requires_test_type():
    with pytest.raises(ValueError):
        ResultsStore().record(make_result(3))


def test_summary_flags_asymmetry(store):
    summary = store.summary(TestType.VISUAL_ACUITY)
    assert summary.asymmetry is True
    assert summary.status == "warning"


def test_trial_rows_and_csv(store, tmp_path):
    rows = store.trial_rows(participant="007")
    left, right = store.pair(TestType.VISUAL_ACUITY)
    assert len(rows) == len(left.trial_history) + len(right.trial_history)
    assert rows[0]["participant"] == "007"
    assert rows[0]["trial_index"] == 1

    fields = ScreeningConfig().data_fields
    path = store.save_trials_csv(tmp_path / "out" / "trials.csv", fields, participant="007")
    with path.open(newline="", encoding="utf-8") as csv_file:
        reader = csv.DictReader(csv_file)
        assert reader.fieldnames == fields
        written = list(reader)
    assert len(written) == len(rows)
    assert {row["eye"] for row in written} == {"left", "right"}


def test_saved_columns_cover_every_trial_field(store):
    # nothing recorded per trial is left out of the CSV
    fields = ScreeningConfig().data_fields
    for row in store.trial_rows(participant="007"):
        assert list(row) == fields
    assert "rt_s" not in fields


def test_report_json(store, tmp_path):
    store.record(make_contrast_result(7, Eye.RIGHT), TestType.CONTRAST_SENSITIVITY)
    path = store.save_report_json(tmp_path / "report.json", {"Participant ID": "7"})
    report = json.loads(path.read_text(encoding="utf-8"))
    assert report["participant"] == {"Participant ID": "7"}
    assert set(report["tests"]) == {"visual_acuity", "contrast_sensitivity"}
    contrast = report["tests"]["contrast_sensitivity"]
    assert contrast["left"] is None
    assert contrast["right"]["score"] == pytest.approx(0.9)
    assert contrast["summary"]["status"] == "complete"
    assert report["tests"]["visual_acuity"]["left"]["score"] == "20/20"


def test_clear(store):
    store.clear()
    assert len(store) == 0
    assert store.completed_tests() == []


@pytest.mark.parametrize(
    "participant, expected",
    [("7", "vision_screen_007.csv"), ("abc", "vision_screen_abc.csv"), ("", "vision_screen_unknown.csv")],
)
def test_default_filename(participant, expected):
    assert default_filename("vision_screen", participant, ".csv") == expected
