"""
Shared fixtures for the bridge tests.
"""

import sys
import textwrap

import pytest

from regobridge.core.invoker import ProcessInvoker
from regobridge.core.models import Settings
from regobridge.plugins.base import InstallPrompt
from regobridge.plugins.settings import StaticSettingsProvider


class RecordingInstallPrompt(InstallPrompt):
    def __init__(self):
        self.calls = 0

    def prompt(self) -> None:
        self.calls += 1


@pytest.fixture
def install_prompt():
    return RecordingInstallPrompt()


@pytest.fixture
def make_binary(tmp_path):
    """Write an executable Python script standing in for opa."""
    if sys.platform.startswith("win"):
        pytest.skip("fake binaries rely on shebang lines")

    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    def _make(body: str, name: str = "opa"):
        path = bin_dir / name
        path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body))
        path.chmod(0o755)
        return path

    return _make


@pytest.fixture
def make_invoker(install_prompt):
    """Build a ProcessInvoker whose settings point at a fake binary."""

    def _make(binary=None, timeout=None):
        settings = Settings(path=str(binary) if binary else None, timeout=timeout)
        return ProcessInvoker(StaticSettingsProvider(settings), install_prompt)

    return _make


FAKE_OPA = '''
import json
import sys

args = sys.argv[1:]

if args == ["version"]:
    print("Version: 0.15.1")
    print("Build Commit: 0123abcd")
    print("Go Version: go1.21.0")
    sys.exit(0)

if args[:1] == ["parse"]:
    if args[1].endswith("broken.rego"):
        print("1 error occurred: broken.rego:1: rego_parse_error: package expected", file=sys.stderr)
        sys.exit(1)
    print(json.dumps({
        "package": {"path": [
            {"type": "var", "value": "data"},
            {"type": "string", "value": "authz"},
            {"type": "string", "value": "http-api"},
        ]},
        "imports": [
            {"path": {"type": "ref", "value": [
                {"type": "var", "value": "data"},
                {"type": "string", "value": "lib"},
                {"type": "string", "value": "utils"},
            ]}},
            {"path": {"type": "ref", "value": [
                {"type": "var", "value": "input"},
            ]}, "alias": "req"},
        ],
        "rules": [],
    }))
    sys.exit(0)

print(json.dumps({"args": args, "stdin": sys.stdin.read()}))
'''


@pytest.fixture
def fake_opa(make_binary):
    return make_binary(FAKE_OPA)
