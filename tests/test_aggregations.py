from ow_tracker.aggregations import (
    average_rating,
    match_history,
    peak_rating,
    valley_rating,
)


def _seed(store, add_matches):
    add_matches(
        store,
        "support",
        [
            (2500, "Hanamura", None),
            (2550, "Busan", None),
            (2520, "Ilios", "thrower"),
            (2600, "Oasis", None),
        ],
    )


def test_average_all_matches(store, add_matches):
    _seed(store, add_matches)
    result = average_rating(store, "support")
    assert result == {"role": "support", "outcome": None, "average": 2542.5}


def test_average_filtered_with_count(store, add_matches):
    _seed(store, add_matches)
    wins = average_rating(store, "support", outcome="win", include_count=True)
    assert wins["average"] == 2575.0
    assert wins["count"] == 2

    losses = average_rating(store, "support", outcome="loss", include_count=True)
    assert losses["average"] == 2520.0
    assert losses["count"] == 1


def test_average_without_matches(store):
    result = average_rating(store, "tank", include_count=True)
    assert result["average"] is None
    assert result["count"] == 0


def test_peak_and_valley(store, add_matches):
    _seed(store, add_matches)
    assert peak_rating(store, "support")["rating"] == 2600
    valley = valley_rating(store, "support")
    assert valley["rating"] == 2500
    assert valley["map"] == "Hanamura"
    assert peak_rating(store, "dps") is None


def test_history_rows(store, add_matches):
    _seed(store, add_matches)
    rows = match_history(store, "support", outcome="loss")
    assert len(rows) == 1
    assert rows[0]["comment"] == "thrower"
    assert rows[0]["outcome"] == "loss"
