from datetime import datetime, timezone

import pytest

from tablewise.planner_schemas import RecipeUserMeta
from tablewise.services.user_meta import prune_orphans, set_rating, toggle_my_pick


def test_toggle_my_pick_from_nothing():
    assert toggle_my_pick(None).is_my_pick is True
    assert toggle_my_pick(RecipeUserMeta(is_my_pick=True, rating=2)) == RecipeUserMeta(rating=2)


def test_set_rating_stamps_time():
    now = datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)
    meta = set_rating(RecipeUserMeta(is_my_pick=True), 5, now=now)
    assert meta.rating == 5
    assert meta.rated_at == now
    assert meta.is_my_pick is True


@pytest.mark.parametrize("rating", [0, 6])
def test_set_rating_out_of_range(rating):
    with pytest.raises(ValueError):
        set_rating(None, rating)


def test_prune_orphans():
    kept, dropped = prune_orphans({"a": 1, "b": 2}, ["a", "c"])
    assert kept == {"a": 1}
    assert dropped == 1
