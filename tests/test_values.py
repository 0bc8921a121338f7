import pytest

from upspin_config.errors import ConfigError, Kind
from upspin_config.values import as_string, canonical_text, resolve

DEFAULTS = {"username": "noone@nowhere.org", "packing": "ee", "dirserver": ""}


def test_known_keys_replace_defaults_and_others_pass_through() -> None:
    known, other = resolve(
        DEFAULTS,
        b"# comment line\nusername: ann@example.com\nfoo: 42\nbar: {a: 1}\n",
    )

    assert known == {"username": "ann@example.com", "packing": "ee", "dirserver": ""}
    assert other == {"foo": 42, "bar": {"a": 1}}


def test_scalars_for_known_keys_are_stringified() -> None:
    known, _ = resolve(DEFAULTS, "packing: 20\ndirserver: true\n")

    assert known["packing"] == "20"
    assert known["dirserver"] == "true"


def test_key_equals_value_lines_are_accepted() -> None:
    known, other = resolve(DEFAULTS, "username = ann@example.com\nextra = remote,x:1\n")

    assert known["username"] == "ann@example.com"
    assert other == {"extra": "remote,x:1"}


def test_empty_document_keeps_defaults() -> None:
    known, other = resolve(DEFAULTS, b"")

    assert known == DEFAULTS
    assert other == {}


def test_non_scalar_known_value_is_rejected() -> None:
    with pytest.raises(ConfigError, match="'username'") as excinfo:
        resolve(DEFAULTS, "username: [a, b]\n")
    assert excinfo.value.kind is Kind.INVALID


@pytest.mark.parametrize("raw", ["username: [unclosed\n", "- just\n- a list\n"])
def test_undecodable_document_is_invalid(raw: str) -> None:
    with pytest.raises(ConfigError, match="parsing YAML file") as excinfo:
        resolve(DEFAULTS, raw)
    assert excinfo.value.kind is Kind.INVALID


def test_dates_stay_as_written() -> None:
    _, other = resolve(DEFAULTS, "since: 2017-01-02\n")
    assert other == {"since": "2017-01-02"}


@pytest.mark.parametrize(
    "value,expected",
    [("abc", "abc"), (42, "42"), (1.5, "1.5"), (1.0, "1"), (-3.0, "-3"), (True, "true"), (False, "false")],
)
def test_as_string(value, expected) -> None:
    assert as_string(value) == expected


@pytest.mark.parametrize("value", [None, [1], {"a": 1}])
def test_as_string_rejects_non_scalars(value) -> None:
    with pytest.raises(ConfigError, match="unrecognized value"):
        as_string(value)


def test_canonical_text_dumps_nested_values_as_yaml() -> None:
    assert canonical_text({"mycmd": {"flag": "v"}}) == "mycmd:\n  flag: v"
    assert canonical_text(["a", "b"]) == "- a\n- b"
    assert canonical_text(None) == "null"
    assert canonical_text(42) == "42"
