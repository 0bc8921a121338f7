import argparse
from typing import Dict, Optional

import pytest

from upspin_config.config import new, set_value
from upspin_config.errors import ConfigError, Kind
from upspin_config.flags import ArgparseFlags, set_flag_values


class _FakeFlag:
    def __init__(self, default: str, valid=lambda text: True) -> None:
        self.default = default
        self.current = default
        self._valid = valid

    def current_string(self) -> str:
        return self.current

    def default_string(self) -> str:
        return self.default

    def set(self, text: str) -> None:
        if not self._valid(text):
            raise ValueError(f"bad value {text!r}")
        self.current = text


class _FakeRegistry:
    def __init__(self, **flags: _FakeFlag) -> None:
        self.flags: Dict[str, _FakeFlag] = flags

    def lookup(self, name: str) -> Optional[_FakeFlag]:
        return self.flags.get(name)


def _cfg(cmdflags: str):
    return set_value(new(), "cmdflags", cmdflags)


def test_flag_at_default_is_set() -> None:
    registry = _FakeRegistry(flagname=_FakeFlag("x"))

    set_flag_values(_cfg("mycmd:\n  flagname: v"), "mycmd", registry)

    assert registry.flags["flagname"].current == "v"


def test_flag_given_on_command_line_wins() -> None:
    flag = _FakeFlag("x")
    flag.current = "from-cli"
    registry = _FakeRegistry(flagname=flag)

    set_flag_values(_cfg("mycmd:\n  flagname: v"), "mycmd", registry)

    assert flag.current == "from-cli"


def test_missing_cmdflags_is_noop() -> None:
    registry = _FakeRegistry(flagname=_FakeFlag("x"))

    set_flag_values(new(), "mycmd", registry)

    assert registry.flags["flagname"].current == "x"


def test_rejected_value_is_skipped() -> None:
    registry = _FakeRegistry(
        count=_FakeFlag("0", valid=str.isdigit),
        name=_FakeFlag(""),
    )

    set_flag_values(_cfg("mycmd:\n  count: lots\n  name: ann"), "mycmd", registry)

    assert registry.flags["count"].current == "0"
    assert registry.flags["name"].current == "ann"


def test_unknown_flag_aborts_after_earlier_flags() -> None:
    registry = _FakeRegistry(first=_FakeFlag(""), last=_FakeFlag(""))

    with pytest.raises(ConfigError, match="unknown flag 'nope'") as excinfo:
        set_flag_values(_cfg("mycmd:\n  first: 1\n  nope: 2\n  last: 3"), "mycmd", registry)

    assert excinfo.value.kind is Kind.INVALID
    assert registry.flags["first"].current == "1"
    assert registry.flags["last"].current == ""


def test_scalar_values_are_stringified() -> None:
    registry = _FakeRegistry(verbose=_FakeFlag("false"), n=_FakeFlag("0"))

    set_flag_values(_cfg("mycmd:\n  verbose: true\n  n: 3"), "mycmd", registry)

    assert registry.flags["verbose"].current == "true"
    assert registry.flags["n"].current == "3"


@pytest.mark.parametrize(
    "cmdflags,match",
    [
        ("other:\n  flag: v", "bad cmdflags for mycmd"),
        ("mycmd: just-a-string", "bad cmdflags for mycmd"),
        ("mycmd:\n  flag: [a, b]", "bad flag value for flag"),
        ("mycmd: {flag: [unclosed", "bad cmdflags value"),
    ],
)
def test_malformed_cmdflags(cmdflags: str, match: str) -> None:
    with pytest.raises(ConfigError, match=match):
        set_flag_values(_cfg(cmdflags), "mycmd", _FakeRegistry(flag=_FakeFlag("")))


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser()
    parser.add_argument("--output", choices=["json", "yaml"], default="json")
    parser.add_argument("--count", type=int, default=1)
    parser.add_argument("--verbose", action="store_true")
    parser.add_argument("--docs", dest="docs", action="store_false")
    return parser


def test_argparse_flags_apply_config_values() -> None:
    parser = _parser()
    args = parser.parse_args([])
    cfg = _cfg("mycmd:\n  output: yaml\n  count: 5\n  verbose: true\n  docs: false")

    set_flag_values(cfg, "mycmd", ArgparseFlags(parser, args))

    assert args.output == "yaml"
    assert args.count == 5
    assert args.verbose is True
    assert args.docs is False


def test_argparse_flags_keep_command_line_values() -> None:
    parser = _parser()
    args = parser.parse_args(["--count", "9"])

    set_flag_values(_cfg("mycmd:\n  count: 5"), "mycmd", ArgparseFlags(parser, args))

    assert args.count == 9


def test_argparse_flags_skip_invalid_values() -> None:
    parser = _parser()
    args = parser.parse_args([])

    set_flag_values(
        _cfg("mycmd:\n  output: xml\n  count: many\n  verbose: perhaps"),
        "mycmd",
        ArgparseFlags(parser, args),
    )

    assert args.output == "json"
    assert args.count == 1
    assert args.verbose is False


def test_argparse_lookup_by_option_or_dest() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--log-level", default="INFO")
    flags = ArgparseFlags(parser, parser.parse_args([]))

    assert flags.lookup("log-level") is not None
    assert flags.lookup("--log-level") is not None
    assert flags.lookup("log_level") is not None
    assert flags.lookup("help") is None
    assert flags.lookup("missing") is None


def test_argparse_flags_typed_string_default_counts_as_default() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--log-level", type=str.upper, choices=["INFO", "DEBUG"], default="info")
    args = parser.parse_args([])
    assert args.log_level == "INFO"

    set_flag_values(_cfg("mycmd:\n  log-level: debug"), "mycmd", ArgparseFlags(parser, args))

    assert args.log_level == "DEBUG"
