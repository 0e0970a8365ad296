from datetime import timedelta

import pytest

from layercache.store import (
    NOT_FOUND_ERR,
    InvalidateOptions,
    InvalidateOptionsMatcher,
    NotFound,
    Options,
    OptionsMatcher,
    apply_invalidate_options,
    apply_invalidate_options_with_default,
    apply_options,
    apply_options_with_default,
    not_found_with_cause,
    with_client_side_caching,
    with_cost,
    with_expiration,
    with_invalidate_tags,
    with_tags,
)


def test_not_found_message_and_type():
    err = not_found_with_cause(None)
    assert isinstance(err, NotFound)
    assert str(err) == NOT_FOUND_ERR
    assert str(err) == str(NotFound())
    assert err.cause is None


def test_not_found_keeps_cause():
    cause = ValueError("this is an expected error cause")
    err = not_found_with_cause(cause)
    assert err.cause is cause
    assert err.__cause__ is cause
    with pytest.raises(NotFound, match="value not found in store"):
        raise err


def test_invalidate_options_tags_value():
    options = apply_invalidate_options(with_invalidate_tags(["tag1", "tag2", "tag3"]))
    assert options.tags == ["tag1", "tag2", "tag3"]


def test_options_cost_value():
    assert apply_options(with_cost(7)).cost == 7


def test_options_expiration_value():
    assert apply_options(with_expiration(timedelta(seconds=25))).expiration == timedelta(seconds=25)


def test_options_expiration_accepts_seconds():
    assert apply_options(with_expiration(5)).expiration == timedelta(seconds=5)


def test_options_expiration_rejects_text():
    with pytest.raises(TypeError):
        with_expiration("5")


def test_options_tags_value():
    assert apply_options(with_tags(["tag1", "tag2", "tag3"])).tags == ["tag1", "tag2", "tag3"]


def test_client_side_caching():
    options = apply_options(with_client_side_caching(timedelta(minutes=1)))
    assert options.client_side_cache_expiration == timedelta(minutes=1)
    assert options.is_empty()


def test_apply_options_with_default():
    default = Options(expiration=timedelta(seconds=25))
    options = apply_options_with_default(default, with_cost(7))
    assert options.cost == 7
    assert options.expiration == timedelta(seconds=25)
    assert default.cost == 0


def test_apply_options_skips_none():
    assert apply_options(None, with_cost(3)) == Options(cost=3)


def test_options_is_empty():
    assert Options().is_empty() is True
    assert Options(tags=["a"]).is_empty() is False
    assert Options(cost=1).is_empty() is False


def test_invalidate_default_used_when_empty():
    default = InvalidateOptions(tags=["fallback"])
    assert apply_invalidate_options_with_default(default).tags == ["fallback"]
    applied = apply_invalidate_options_with_default(default, with_invalidate_tags(["x"]))
    assert applied.tags == ["x"]


def test_options_matcher():
    matcher = OptionsMatcher(expiration=timedelta(seconds=5))
    assert matcher.matches((with_expiration(timedelta(seconds=5)),)) is True
    assert matcher.matches([with_expiration(6)]) is False
    assert matcher.matches("not options") is False
    assert OptionsMatcher().matches(()) is True
    assert "cost: 0" in str(matcher)


def test_options_matcher_with_tags():
    matcher = OptionsMatcher(tags=["a", "b"])
    assert matcher.matches([with_tags(["a", "b"])]) is True
    assert matcher.matches([with_tags(["b", "a"])]) is False


def test_invalidate_options_matcher():
    matcher = InvalidateOptionsMatcher(tags=["tag1"])
    assert matcher.matches((with_invalidate_tags(["tag1"]),)) is True
    assert matcher.matches(()) is False
    assert matcher.matches(42) is False
    assert str(matcher) == "invalidate options should match (tags: ['tag1'])"