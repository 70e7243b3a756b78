# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for tfrelease tests.

No test needs Go, GnuPG, or the GitHub CLI. `fake_go` stands in for the
compiler by answering `go build` calls with a small deterministic "binary"
written to the requested -o path. The compiler executable is set to the
running Python interpreter so the PATH lookup in the environment check
succeeds.
"""

import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

from tfrelease.config.schema import ReleaseConfig

MISSING_TOOL = "tfrelease-test-missing-tool"


class FakeGoToolchain:
    """Callable replacement for subprocess.run that pretends to be `go build`."""

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], dict[str, str]]] = []
        # Entries are "os/arch" (fails every build of that target) or
        # ("os/arch", static) to fail only one variant.
        self.fail: set[object] = set()

    def __call__(self, command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        env = dict(kwargs.get("env") or {})  # type: ignore[arg-type]
        self.calls.append((list(command), env))

        target = f"{env.get('GOOS')}/{env.get('GOARCH')}"
        static = env.get("CGO_ENABLED") == "0"
        if target in self.fail or (target, static) in self.fail:
            return subprocess.CompletedProcess(command, 1, stdout="", stderr=f"cannot build {target}")

        output = Path(command[command.index("-o") + 1])
        output.write_bytes(f"provider binary for {target} static={static}\n".encode())
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")

    def built_targets(self) -> list[str]:
        return [f"{env['GOOS']}/{env['GOARCH']}" for _, env in self.calls]


@pytest.fixture()
def fake_go(monkeypatch: pytest.MonkeyPatch) -> FakeGoToolchain:
    fake = FakeGoToolchain()
    monkeypatch.setattr("tfrelease.release.building.compiler.subprocess.run", fake)
    return fake


def make_config(**sections: dict[str, object]) -> ReleaseConfig:
    """A config that builds with the fake toolchain and never signs or publishes for real."""
    data: dict[str, dict[str, object]] = {
        "build": {"go_binary": sys.executable},
        "signing": {"gpg_binary": MISSING_TOOL},
        "publish": {"enabled": False, "gh_binary": MISSING_TOOL},
    }
    for name, values in sections.items():
        data.setdefault(name, {}).update(values)
    return ReleaseConfig.model_validate(data)


@pytest.fixture()
def config_factory():  # type: ignore[no-untyped-def]
    """Build a test config from per-section overrides."""
    return make_config


@pytest.fixture()
def release_config() -> ReleaseConfig:
    """The default 13-target matrix plus the two Oracle Linux overrides."""
    return make_config()


@pytest.fixture()
def small_config() -> ReleaseConfig:
    """Two targets, one of them Windows, one overridden by a static build."""
    return make_config(
        build={"targets": ["linux/amd64", "windows/amd64"], "compat_targets": ["linux/amd64"]},
    )


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """A minimal valid config YAML file that keeps external tools out of the way."""
    config_content = textwrap.dedent(f"""\
        global:
          config_version: "1.0.0"
          project_name: "tfrelease-test"
          log_level: "DEBUG"
        provider:
          name: "example"
          version: "1.2.3"
        build:
          go_binary: "{sys.executable}"
          targets: ["linux/amd64", "windows/amd64"]
          compat_targets: ["linux/amd64"]
        signing:
          gpg_binary: "{MISSING_TOOL}"
        publish:
          enabled: false
    """)
    config_file = tmp_path / "release.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def invalid_config_file(tmp_path: Path) -> Path:
    """Valid YAML that fails schema validation (unknown OS in the matrix)."""
    config_content = textwrap.dedent("""\
        build:
          targets: ["plan9/amd64"]
    """)
    config_file = tmp_path / "invalid.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file
