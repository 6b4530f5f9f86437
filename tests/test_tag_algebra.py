"""Tests for the tag algebra (core/tag_algebra.py).

Coverage:

* Mode classification: replace / ops / direct
* Trimming and empty-token handling
* ``(existing - removed) + added`` with order preservation
* Bulk-update restrictions
"""

from __future__ import annotations

import pytest

from rain_cli.core.models import TagMode
from rain_cli.core.tag_algebra import (
    apply_tag_expression,
    parse_tag_expression,
    require_additive,
)
from rain_cli.exceptions import InvalidArgumentsError


# ---------------------------------------------------------------------------
# parse_tag_expression
# ---------------------------------------------------------------------------

class TestParse:
    def test_replace(self) -> None:
        expr = parse_tag_expression("=only, these ,")
        assert expr.mode is TagMode.REPLACE
        assert expr.adds == ("only", "these")

    def test_empty_replace_clears(self) -> None:
        expr = parse_tag_expression("=")
        assert expr.mode is TagMode.REPLACE
        assert expr.adds == ()

    def test_ops(self) -> None:
        expr = parse_tag_expression("+new,-old")
        assert expr.mode is TagMode.OPS
        assert expr.adds == ("new",)
        assert expr.removes == ("old",)
        assert expr.needs_current_tags

    def test_direct(self) -> None:
        expr = parse_tag_expression("a, b,,c")
        assert expr.mode is TagMode.DIRECT
        assert expr.adds == ("a", "b", "c")
        assert not expr.needs_current_tags

    def test_mixed_unsigned_are_additions(self) -> None:
        expr = parse_tag_expression("plain,-gone")
        assert expr.mode is TagMode.OPS
        assert expr.adds == ("plain",)
        assert expr.removes == ("gone",)

    def test_duplicates_collapse(self) -> None:
        assert parse_tag_expression("+a,+a").adds == ("a",)

    def test_lone_sign_rejected(self) -> None:
        with pytest.raises(InvalidArgumentsError):
            parse_tag_expression("+,-x")


# ---------------------------------------------------------------------------
# apply_tag_expression
# ---------------------------------------------------------------------------

class TestApply:
    def test_ops_preserves_existing_order(self) -> None:
        expr = parse_tag_expression("+new,-old")
        assert apply_tag_expression(expr, ["api", "old", "zeta"]) == ["api", "zeta", "new"]

    def test_ops_does_not_duplicate_existing(self) -> None:
        expr = parse_tag_expression("+api")
        assert apply_tag_expression(expr, ["api"]) == ["api"]

    def test_removing_missing_tag_is_noop(self) -> None:
        expr = parse_tag_expression("-nothere")
        assert apply_tag_expression(expr, ["a"]) == ["a"]

    def test_replace_ignores_current(self) -> None:
        expr = parse_tag_expression("=x")
        assert apply_tag_expression(expr, ["a", "b"]) == ["x"]

    def test_direct_ignores_current(self) -> None:
        expr = parse_tag_expression("x,y")
        assert apply_tag_expression(expr, ["a"]) == ["x", "y"]


# ---------------------------------------------------------------------------
# require_additive
# ---------------------------------------------------------------------------

class TestRequireAdditive:
    def test_accepts_additions(self) -> None:
        assert require_additive(parse_tag_expression("+needs-review,x")) == ("needs-review", "x")

    def test_rejects_replace(self) -> None:
        with pytest.raises(InvalidArgumentsError, match="replacement"):
            require_additive(parse_tag_expression("=a"))

    def test_rejects_removal(self) -> None:
        with pytest.raises(InvalidArgumentsError, match="removal"):
            require_additive(parse_tag_expression("+a,-b"))
