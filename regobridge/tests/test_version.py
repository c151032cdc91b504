"""
Tests for version parsing, ordering and the compatibility decisions.
"""

import math

import pytest

from regobridge.core.models import BinaryNotFound, ProcessStatus
from regobridge.core.version import (
    BUNDLE_MIN_VERSION,
    Compatibility,
    parse_version,
    same_or_newer,
    to_number,
    version_from_output,
)


class FakeInvoker:
    """Returns canned statuses and counts the queries made."""

    def __init__(self, *statuses):
        self.statuses = list(statuses)
        self.calls = []

    def run_with_status(self, path, args, stdin="", timeout=None):
        self.calls.append((path, args))
        if len(self.statuses) > 1:
            return self.statuses.pop(0)
        return self.statuses[0]


def version_status(version: str) -> ProcessStatus:
    return ProcessStatus(exit_code=0, stdout=f"Version: {version}\nBuild Commit: abc\n")


class TestParseVersion:
    def test_full_version(self):
        v = parse_version("0.14.0-dev")

        assert v.numeric() == (0, 14, 0)
        assert v.patch == "dev"

    def test_without_patch(self):
        v = parse_version("1.2.3")

        assert v.numeric() == (1, 2, 3)
        assert v.patch == ""

    def test_too_few_parts(self):
        assert parse_version("not-a-version") is None
        assert parse_version("1.2") is None
        assert parse_version("") is None

    def test_extra_parts_are_ignored(self):
        v = parse_version("1.2.3.4")

        assert v.numeric() == (1, 2, 3)

    def test_patch_keeps_only_first_dash_piece(self):
        v = parse_version("1.2.3-rc-1")

        assert v.patch == "rc"

    def test_non_numeric_piece_is_nan(self):
        v = parse_version("1.x.3")

        assert math.isnan(v.minor)

    def test_number_conversion(self):
        assert to_number(" 12 ") == 12
        assert to_number("") == 0
        assert to_number("0x10") == 16
        assert math.isnan(to_number("1a"))
        assert math.isnan(to_number("nan"))


class TestSameOrNewer:
    @pytest.mark.parametrize("version", ["0.14.0-dev", "1.0.0", "0.60.0-rc1"])
    def test_same_version(self, version):
        assert same_or_newer(version, version)

    def test_newer_point(self):
        assert same_or_newer("0.15.0", "0.14.0-dev")

    def test_older_minor(self):
        assert not same_or_newer("0.13.0", "0.14.0-dev")

    def test_numeric_not_lexicographic(self):
        assert same_or_newer("0.100.0", "0.14.0")
        assert not same_or_newer("0.9.0", "0.14.0")

    def test_release_beats_prerelease(self):
        assert same_or_newer("0.14.0", "0.14.0-dev")
        assert not same_or_newer("0.14.0-dev", "0.14.0")

    def test_patch_lexicographic(self):
        assert same_or_newer("0.14.0-rc2", "0.14.0-rc1")
        assert not same_or_newer("0.14.0-alpha", "0.14.0-beta")

    def test_unparseable_is_permissive(self):
        assert same_or_newer("not-a-version", "0.14.0-dev")
        assert same_or_newer("0.14.0-dev", "")

    def test_nan_sorts_lowest(self):
        assert not same_or_newer("0.x.0", "0.14.0")
        assert same_or_newer("0.14.0", "0.x.0")
        assert same_or_newer("0.x.0", "0.x.0")

    def test_repeated_calls_agree(self):
        results = {same_or_newer("0.13.9", BUNDLE_MIN_VERSION) for _ in range(5)}

        assert results == {False}


class TestVersionFromOutput:
    def test_finds_version_line(self):
        output = "Version: 0.34.2\nBuild Commit: 1234\nBuild Timestamp: 2021-11-02T12:00:00Z\n"

        assert version_from_output(output) == "0.34.2"

    def test_line_is_trimmed(self):
        assert version_from_output("  Version: 0.20.0  \n") == "0.20.0"

    def test_value_keeps_later_separators(self):
        assert version_from_output("Version: 1.0.0: extra") == "1.0.0: extra"

    def test_missing(self):
        assert version_from_output("Build Commit: 1234\n") == ""
        assert version_from_output("") == ""


class TestCompatibility:
    def test_installed_version_string(self):
        invoker = FakeInvoker(version_status("0.15.1"))
        compat = Compatibility(invoker)

        assert compat.installed_version_string() == "0.15.1"
        assert invoker.calls == [("opa", ["version"])]

    def test_non_zero_exit(self):
        invoker = FakeInvoker(ProcessStatus(exit_code=1, stdout="Version: 0.15.1"))

        assert Compatibility(invoker).installed_version_string() == ""

    def test_binary_not_found(self):
        invoker = FakeInvoker(BinaryNotFound(path="opa"))
        compat = Compatibility(invoker)

        assert compat.installed_version_string() == ""
        # unknown versions are treated as new enough
        assert compat.can_use_bundle_flags()

    def test_old_binary_uses_data_flag(self, tmp_path):
        compat = Compatibility(FakeInvoker(version_status("0.13.5")))

        assert not compat.can_use_bundle_flags()
        assert compat.data_param() == "--data"
        assert compat.data_dir(tmp_path) == str(tmp_path.resolve())

    def test_new_binary_uses_bundle_flag(self, tmp_path):
        compat = Compatibility(FakeInvoker(version_status("0.14.0")))

        assert compat.can_use_bundle_flags()
        assert compat.data_param() == "--bundle"
        assert compat.data_dir(tmp_path) == tmp_path.resolve().as_uri()

    def test_decision_is_not_cached(self):
        invoker = FakeInvoker(version_status("0.13.0"), version_status("0.14.0"))
        compat = Compatibility(invoker)

        assert not compat.can_use_bundle_flags()
        assert compat.can_use_bundle_flags()
        assert len(invoker.calls) == 2

    def test_real_subprocess(self, fake_opa, make_invoker):
        compat = Compatibility(make_invoker(fake_opa))

        assert compat.installed_version_string() == "0.15.1"
        assert compat.data_param() == "--bundle"
