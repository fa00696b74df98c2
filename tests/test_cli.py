import pytest

from vision_screen.cli import build_arg_parser, main, perform_dry_run
from vision_screen.config import ScreeningConfig
from vision_screen.protocols import TestType
from vision_screen.staircase import Eye


def test_parser_defaults():
    args = build_arg_parser().parse_args([])
    assert args.test == "acuity"
    assert args.eyes == ["right", "left"]
    assert args.dry_run is False


def test_dry_run_reports_asymmetry(capsys):
    main(["--dry-run", "--seed", "5", "--left-threshold", "8", "--right-threshold", "6"])
    out = capsys.readouterr().out
    assert "Tumbling E Visual Acuity Test" in out
    assert "score=20/20 | levels=8/10" in out
    assert "score=20/30 | levels=6/10" in out
    assert "asymmetry: yes" in out
    assert "status   : warning" in out
    assert "Dry-run complete." in out


def test_dry_run_contrast_undetermined(capsys):
    main(["--dry-run", "--test", "contrast", "--eyes", "left", "--left-threshold", "0"])
    out = capsys.readouterr().out
    assert "score=Unable to determine | levels=0/10" in out
    assert "left  : undetermined" in out
    assert "asymmetry: no" in out


def test_perform_dry_run_returns_store():
    config = ScreeningConfig(test_name="contrast", seed=1)
    store = perform_dry_run(config, {Eye.LEFT: 10, Eye.RIGHT: 7})
    left, right = store.pair(TestType.CONTRAST_SENSITIVITY)
    assert left.levels_passed == 10
    assert left.score.value == 1.35
    assert right.score.value == 0.9
    assert store.summary(TestType.CONTRAST_SENSITIVITY).status == "warning"


@pytest.mark.parametrize("flag", ["--left-threshold", "--right-threshold"])
@pytest.mark.parametrize("value", ["-1", "three"])
def test_threshold_rejects_invalid_values(flag, value, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--dry-run", flag, value])
    assert excinfo.value.code == 2
    assert flag in capsys.readouterr().err


def test_threshold_accepts_zero():
    args = build_arg_parser().parse_args(["--left-threshold", "0"])
    assert args.left_threshold == 0
