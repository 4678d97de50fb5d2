import pytest

from profile_bootstrap.errors import QueryError
from profile_bootstrap.updatesets import UpdateTarget, VersionProbe, check_updates


def fake_query(table):
    calls = []

    def query(target):
        calls.append(target.name)
        value = table[target.name]
        if isinstance(value, Exception):
            raise value
        return value

    query.calls = calls
    return query


def targets(*names):
    return [UpdateTarget(n, "PyPI") for n in names]


def test_empty_target_list_is_up_to_date():
    result = check_updates("modules", [], fake_query({}))
    assert result.up_to_date
    assert result.entries == []
    assert result.error is None


def test_two_targets_one_mismatch():
    query = fake_query(
        {
            "same": VersionProbe("1.0.0", "1.0.0"),
            "stale": VersionProbe("1.0.0", "1.1.0"),
        }
    )
    result = check_updates("modules", targets("same", "stale"), query)
    assert result.names == ["stale"]
    assert result.entries[0].reason == "1.0.0 -> 1.1.0"


def test_mismatches_keep_input_order_and_appear_once():
    query = fake_query(
        {
            "c": VersionProbe("3", "4"),
            "a": VersionProbe("1", "2"),
            "b": VersionProbe("2", "2"),
        }
    )
    result = check_updates("modules", targets("c", "a", "b", "c"), query)
    assert result.names == ["c", "a"]
    assert query.calls == ["c", "a", "b"]


def test_partial_failure_is_isolated():
    query = fake_query(
        {
            "one": VersionProbe("1.0", "2.0"),
            "broken": QueryError("HTTP 503: Service Unavailable"),
            "three": VersionProbe("0.1", "0.2"),
        }
    )
    result = check_updates("modules", targets("one", "broken", "three"), query)
    assert result.names == ["one", "three"]
    assert len(result.warnings) == 1
    assert "broken" in result.warnings[0]
    assert result.error is None


def test_not_installed_is_skipped_with_warning():
    query = fake_query({"ghost": VersionProbe(None, "9.9")})
    result = check_updates("modules", targets("ghost"), query)
    assert result.up_to_date
    assert result.warnings == ["ghost: not installed, skipped"]


@pytest.mark.parametrize(
    "installed, available, expected",
    [
        ("1.10", "1.9", True),
        ("1.9", "1.10", True),
        ("2.0.0", "2.0", True),
        ("1.0 ", "1.0", False),
        ("1.0", None, False),
    ],
)
def test_comparison_is_exact_inequality(installed, available, expected):
    query = fake_query({"pkg": VersionProbe(installed, available)})
    result = check_updates("modules", targets("pkg"), query)
    assert (not result.up_to_date) is expected


def test_all_queries_failing_marks_source_error():
    query = fake_query({"a": RuntimeError("offline"), "b": RuntimeError("offline")})
    result = check_updates("modules", targets("a", "b"), query)
    assert result.up_to_date
    assert result.error == "all queries failed"
