"""
=================================================
Pytest suite for sqlcompose/bridge.py
=================================================

Test Coverage:
--------------
- First-occurrence position assignment and marker reuse
- Independence from mapping iteration order
- Missing names, unused names, start offset
- Agreement with the positional build of the same statement

How to Execute:
---------------
All tests:          pytest tests/tests_sqlcompose/test_bridge.py -v
"""

import logging

import pytest

from sqlcompose.bridge import named_to_positional
from sqlcompose.errors import MissingArgumentError
from sqlcompose.predicates import Between, Eq, In, Or, Raw
from sqlcompose.query_builder import select


@pytest.mark.smoke
def test_repeated_name_shares_position():
    """A name used twice maps to one position and one value."""
    assert named_to_positional("a = @id OR b = @id", {"id": 42}) == ("a = $1 OR b = $1", [42])


@pytest.mark.unit
def test_positions_follow_text_order():
    """Positions are assigned by first appearance in the SQL."""
    sql, values = named_to_positional("x = @b AND y = @a AND z = @b", {"a": 1, "b": 2})

    assert sql == "x = $1 AND y = $2 AND z = $1"
    assert values == [2, 1]


@pytest.mark.unit
def test_mapping_order_is_irrelevant():
    """Two mappings with the same items yield the same result."""
    sql = "a = @first AND b = @second"

    forward = named_to_positional(sql, {"first": 1, "second": 2})
    backward = named_to_positional(sql, {"second": 2, "first": 1})

    assert forward == backward == ("a = $1 AND b = $2", [1, 2])


@pytest.mark.unit
def test_start_offset():
    """Numbering can begin after existing positional values."""
    assert named_to_positional("owner = @uid", {"uid": 7}, start=4) == ("owner = $4", [7])


@pytest.mark.unit
def test_no_markers():
    assert named_to_positional("SELECT 1", {}) == ("SELECT 1", [])


@pytest.mark.unit
def test_dollar_quoted_text_is_not_scanned():
    """@name inside $$...$$ or $tag$...$tag$ is literal text."""
    sql = "SELECT $$@id$$, $fn$ @other $fn$ WHERE a = @id"

    assert named_to_positional(sql, {"id": 1}) == ("SELECT $$@id$$, $fn$ @other $fn$ WHERE a = $1", [1])


@pytest.mark.edge_case
def test_missing_name_raises():
    """A marker without a value is reported by name."""
    with pytest.raises(MissingArgumentError) as exc_info:
        named_to_positional("a = @id AND b = @other", {"id": 1})

    assert exc_info.value.name == "other"


@pytest.mark.edge_case
def test_unused_names_are_dropped(caplog):
    """Extra names are ignored and logged at DEBUG."""
    with caplog.at_level(logging.DEBUG, logger="sqlcompose.bridge"):
        result = named_to_positional("a = @id", {"id": 1, "spare": 2})

    assert result == ("a = $1", [1])
    assert "spare" in caplog.text


@pytest.mark.integration
def test_named_build_bridges_to_positional_build():
    """Bridging a named build gives the positional build of the same query."""
    query = (
        select("*")
        .from_("events")
        .where(Or(Eq("kind", "click"), In("kind", "view", "scroll")), Between("ts", 10, 20))
        .limit(5)
    )

    named_sql, named_args = query.build_named()

    assert named_to_positional(named_sql, named_args) == query.build()


@pytest.mark.integration
def test_raw_named_fragment_through_bridge():
    """Caller names inside a Raw fragment survive the round trip."""
    query = select("*").from_("docs").where(Eq("kind", "note"), Raw("owner = @uid OR editor = @uid", uid=7))

    named_sql, named_args = query.build_named()
    sql, values = named_to_positional(named_sql, named_args)

    assert named_sql == "SELECT * FROM docs WHERE kind = @p1 AND owner = @uid OR editor = @uid"
    assert sql == "SELECT * FROM docs WHERE kind = $1 AND owner = $2 OR editor = $2"
    assert values == ["note", 7]
