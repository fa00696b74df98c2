import pytest

from vision_screen.errors import ConfigurationError
from vision_screen.levels import ACUITY_LEVELS, CONTRAST_LEVELS, Level, LevelTable


def test_builtin_tables_have_ten_contiguous_levels():
    for table in (ACUITY_LEVELS, CONTRAST_LEVELS):
        assert table.level_count() == 10
        assert len(table) == 10
        assert [level.index for level in table] == list(range(10))


def test_acuity_table_endpoints():
    assert ACUITY_LEVELS.level_at(0) == Level(0, 120, "20/200")
    assert ACUITY_LEVELS.level_at(7).score_value == "20/20"
    assert ACUITY_LEVELS.level_at(9) == Level(9, 14, "20/10")


def test_contrast_table_endpoints():
    assert CONTRAST_LEVELS.level_at(0).render_param == 1.0
    assert CONTRAST_LEVELS.level_at(0).score_value == 0.0
    assert CONTRAST_LEVELS.level_at(9).score_value == 1.35


def test_from_pairs_assigns_indices():
    table = LevelTable.from_pairs("tiny", [(3, 0.1), (2, 0.2), (1, 0.3)])
    assert [level.index for level in table] == [0, 1, 2]
    assert table.level_at(2).render_param == 1
    assert table.name == "tiny"


def test_level_at_out_of_range():
    with pytest.raises(IndexError):
        ACUITY_LEVELS.level_at(10)
    with pytest.raises(IndexError):
        ACUITY_LEVELS.level_at(-1)


def test_empty_table_is_configuration_error():
    with pytest.raises(ConfigurationError):
        LevelTable([])


def test_non_contiguous_indices_rejected():
    with pytest.raises(ConfigurationError, match="contiguous"):
        LevelTable([Level(0, 10, 0.1), Level(2, 5, 0.2)])


def test_indices_must_start_at_zero():
    with pytest.raises(ConfigurationError):
        LevelTable([Level(1, 10, 0.1), Level(2, 5, 0.2)])


@pytest.mark.parametrize(
    "scores",
    [
        [0.3, 0.3],
        [0.6, 0.3],
        ["20/40", "20/200"],
        ["20/20", "20/20"],
    ],
)
def test_scores_must_improve_with_difficulty(scores):
    with pytest.raises(ConfigurationError, match="improve"):
        LevelTable.from_pairs("bad", [(index, score) for index, score in enumerate(scores)])


def test_unorderable_labels_are_accepted():
    table = LevelTable.from_pairs("labels", [(1, "easy"), (2, "hard")])
    assert table.level_count() == 2
