# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Build targets and the ordered build plan.

A target is an (os, arch) pair in Go's GOOS/GOARCH vocabulary. The Terraform
Registry matrix is fixed and known before anything runs.

The build plan makes the Oracle Linux override explicit: standard steps run
first in declared order, then the static compatibility steps. A
compatibility step for a target that already has a standard step is
flagged `supersedes=True`: its artifact replaces the standard one under
the same file name, and the builder only performs that replacement when the
static build actually succeeds.
"""

from dataclasses import dataclass

KNOWN_OPERATING_SYSTEMS: frozenset[str] = frozenset(
    {"darwin", "linux", "windows", "freebsd", "openbsd", "netbsd", "solaris"}
)
KNOWN_ARCHITECTURES: frozenset[str] = frozenset(
    {"386", "amd64", "arm", "arm64", "ppc64le", "riscv64", "s390x"}
)

WINDOWS_OS = "windows"
EXECUTABLE_SUFFIX = ".exe"

# Terraform Registry required platforms.
DEFAULT_TARGETS: tuple[str, ...] = (
    "darwin/amd64",
    "darwin/arm64",
    "linux/386",
    "linux/amd64",
    "linux/arm",
    "linux/arm64",
    "windows/386",
    "windows/amd64",
    "windows/arm64",
    "freebsd/386",
    "freebsd/amd64",
    "freebsd/arm",
    "freebsd/arm64",
)

# Oracle Linux 8 compatible builds: statically linked, same file names as
# the standard Linux builds they replace.
DEFAULT_COMPAT_TARGETS: tuple[str, ...] = (
    "linux/amd64",
    "linux/arm64",
)


@dataclass(frozen=True, order=True)
class Target:
    """One (operating system, architecture) pair."""

    os: str
    arch: str

    @classmethod
    def parse(cls, value: str) -> "Target":
        """
        Parse an ``os/arch`` string.

        Raises:
            ValueError: If the string is malformed or names an unknown
                        operating system or architecture.
        """
        parts = value.strip().split("/")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise ValueError(f"Invalid target {value!r}: expected 'os/arch'")
        os_name, arch = parts[0].lower(), parts[1].lower()
        if os_name not in KNOWN_OPERATING_SYSTEMS:
            raise ValueError(
                f"Unknown operating system {os_name!r} in target {value!r}. "
                f"Known: {', '.join(sorted(KNOWN_OPERATING_SYSTEMS))}"
            )
        if arch not in KNOWN_ARCHITECTURES:
            raise ValueError(
                f"Unknown architecture {arch!r} in target {value!r}. "
                f"Known: {', '.join(sorted(KNOWN_ARCHITECTURES))}"
            )
        return cls(os=os_name, arch=arch)

    @property
    def is_windows(self) -> bool:
        return self.os == WINDOWS_OS

    @property
    def executable_suffix(self) -> str:
        return EXECUTABLE_SUFFIX if self.is_windows else ""

    def __str__(self) -> str:
        return f"{self.os}/{self.arch}"


@dataclass(frozen=True)
class BuildStep:
    """A single scheduled compiler invocation."""

    target: Target
    static: bool = False
    supersedes: bool = False

    @property
    def label(self) -> str:
        if self.static:
            return f"{self.target} (static)"
        return str(self.target)


def parse_targets(values: list[str] | tuple[str, ...]) -> list[Target]:
    """Parse target strings, rejecting duplicates."""
    targets: list[Target] = []
    seen: set[Target] = set()
    for value in values:
        target = Target.parse(value)
        if target in seen:
            raise ValueError(f"Duplicate target {value!r}")
        seen.add(target)
        targets.append(target)
    return targets


def resolve_build_plan(
    targets: list[Target],
    compat_targets: list[Target],
) -> list[BuildStep]:
    """
    Order standard and compatibility steps into one explicit plan.

    Standard steps keep their declared order. Compatibility steps follow,
    and each is marked as superseding when the standard matrix already
    covers the same target.
    """
    standard = set(targets)
    plan = [BuildStep(target=t) for t in targets]
    plan.extend(
        BuildStep(target=t, static=True, supersedes=t in standard) for t in compat_targets
    )
    return plan


def expected_targets(plan: list[BuildStep]) -> list[Target]:
    """Distinct targets covered by a plan, in first-scheduled order."""
    seen: dict[Target, None] = {}
    for step in plan:
        seen.setdefault(step.target, None)
    return list(seen)
