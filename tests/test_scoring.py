import pytest

from vision_screen.levels import ACUITY_LEVELS, CONTRAST_LEVELS
from vision_screen.scoring import UNDETERMINED, Determined, map_score


def test_zero_levels_is_undetermined():
    score = map_score(0, ACUITY_LEVELS)
    assert score is UNDETERMINED
    assert not score.is_determined
    assert str(score) == "Unable to determine"


def test_score_comes_from_last_level_passed():
    assert map_score(1, ACUITY_LEVELS) == Determined("20/200")
    assert map_score(8, ACUITY_LEVELS) == Determined("20/20")
    assert map_score(10, ACUITY_LEVELS) == Determined("20/10")


def test_contrast_scores_are_numeric():
    score = map_score(7, CONTRAST_LEVELS)
    assert score.is_determined
    assert score.value == pytest.approx(0.9)
    assert str(score) == "0.90"


@pytest.mark.parametrize("levels_passed", [-1, 11])
def test_out_of_range_is_programming_error(levels_passed):
    with pytest.raises(ValueError):
        map_score(levels_passed, ACUITY_LEVELS)
