import pytest

from ethproofs.fetch import (
    ProveBlockByNumberParams,
    ProveLatestBlockParams,
    ReproduceBlockByNumberParams,
)


@pytest.mark.parametrize("cls", [ProveBlockByNumberParams, ReproduceBlockByNumberParams])
def test_to_query_with_count(cls):
    assert cls(100, 3).to_query() == {"start_block_num": 100, "count": 3}


@pytest.mark.parametrize("cls", [ProveBlockByNumberParams, ReproduceBlockByNumberParams])
def test_to_query_omits_missing_count(cls):
    assert cls(100).to_query() == {"start_block_num": 100}


def test_latest_to_query():
    assert ProveLatestBlockParams(5).to_query() == {"count": 5}
    assert ProveLatestBlockParams().to_query() == {}


@pytest.mark.parametrize("cls", [ProveBlockByNumberParams, ReproduceBlockByNumberParams])
def test_from_query_round_trip(cls):
    original = cls(2**64 - 1, 7)
    query = {key: str(value) for key, value in original.to_query().items()}
    assert cls.from_query(query) == original


def test_from_query_ignores_unknown_keys():
    params = ProveBlockByNumberParams.from_query({"start_block_num": "9", "extra": "x"})
    assert params == ProveBlockByNumberParams(9, None)


def test_latest_from_query():
    assert ProveLatestBlockParams.from_query({"count": "4"}) == ProveLatestBlockParams(4)
    assert ProveLatestBlockParams.from_query({}).count is None


def test_from_query_missing_start_raises():
    with pytest.raises(ValueError, match="start_block_num"):
        ReproduceBlockByNumberParams.from_query({"count": "1"})


@pytest.mark.parametrize("value", ["-1", "abc", "", "1.5", str(2**64)])
def test_from_query_rejects_bad_numbers(value):
    with pytest.raises(ValueError):
        ProveBlockByNumberParams.from_query({"start_block_num": value})
    with pytest.raises(ValueError):
        ProveLatestBlockParams.from_query({"count": value})


def test_constructor_rejects_negative():
    with pytest.raises(ValueError):
        ProveBlockByNumberParams(-1)
    with pytest.raises(ValueError):
        ProveLatestBlockParams(-2)