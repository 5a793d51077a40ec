import pytest

from cakechess import weights
from cakechess.weights import (
    DATA_STR,
    INDEX_EG,
    INDEX_MOBILITY,
    OFFSET_MOBILITY,
    eg_part,
    get_data,
    mg_part,
    pack,
)


@pytest.mark.parametrize("mg", [-300, -1, 0, 1, 300])
@pytest.mark.parametrize("eg", [-500, -1, 0, 1, 500])
def test_pack_round_trip(mg, eg):
    score = pack(mg, eg)
    assert mg_part(score) == mg
    assert eg_part(score) == eg


def test_pack_is_additive():
    assert pack(3, 4) + pack(-10, 7) == pack(-7, 11)


def test_data_string_holds_both_phases():
    assert len(DATA_STR) == 2 * INDEX_EG
    last = get_data(INDEX_EG - 1)
    assert mg_part(last) == ord(DATA_STR[INDEX_EG - 1]) - 32
    assert eg_part(last) == ord(DATA_STR[-1]) - 32


def test_decoded_values_are_non_negative():
    for index in range(INDEX_EG):
        value = get_data(index)
        assert mg_part(value) >= 0
        assert eg_part(value) >= 0


@pytest.mark.parametrize(
    "piece_type,mg,eg",
    [(1, 9, 6), (2, 8, 9), (3, 3, 6), (4, 1, 13), (5, -8, -4)],
)
def test_mobility_weights_decode(piece_type, mg, eg):
    assert get_data(INDEX_MOBILITY + piece_type) + OFFSET_MOBILITY == pack(mg, eg)


def test_material_table_components():
    assert mg_part(weights.MATERIAL[4]) == 1290
    assert eg_part(weights.MATERIAL[4]) == 1975
    assert weights.MATERIAL[5] == 0