# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for tfrelease.

Every section gets its own frozen pydantic model, and every field has a
compiled-in default. Running without a config file therefore releases the
azuread provider exactly the way the hand-maintained release script did;
a YAML file only needs the keys it wants to change.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tfrelease.release.targets import (
    DEFAULT_COMPAT_TARGETS,
    DEFAULT_TARGETS,
    Target,
    parse_targets,
)


class GlobalConfig(BaseModel):
    """Cross-cutting settings: schema version, identity, and logging."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        default="1.0.0", description="Schema version for compatibility tracking"
    )
    project_name: str = Field(
        default="tfrelease", description="Human-readable project identifier"
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level {value!r}")
        return upper


class ProviderConfig(BaseModel):
    """Identity of the provider being released."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    name: str = Field(default="azuread", min_length=1, description="Provider short name")
    version: str = Field(
        default="3.7.4",
        min_length=1,
        description="Release version without the leading 'v'",
    )
    binary_prefix: Optional[str] = Field(
        default=None,
        description="File name prefix; defaults to terraform-provider-<name>",
    )
    description: str = Field(
        default="Terraform Provider for Azure Active Directory",
        description="Human-readable provider title used in release notes",
    )

    @field_validator("version")
    @classmethod
    def _check_version(cls, value: str) -> str:
        value = value.strip()
        if value.startswith("v"):
            raise ValueError("version must not start with 'v'; the tag prefix is added separately")
        if "/" in value or " " in value:
            raise ValueError(f"version {value!r} cannot be used in a file name")
        return value

    @property
    def prefix(self) -> str:
        return self.binary_prefix or f"terraform-provider-{self.name}"


class BuildConfig(BaseModel):
    """
    Compiler invocation and the target matrix.

    `targets` are built first in declared order; `compat_targets` are built
    afterwards with CGO disabled and replace the standard binary for any
    target both lists share.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    go_binary: str = Field(default="go", description="Go toolchain executable")
    source_directory: str = Field(
        default=".",
        description="Directory `go build` runs in, relative to the workspace root",
    )
    output_directory: str = Field(
        default="dist",
        description="Directory wiped and refilled on every run, relative to the workspace root",
    )
    targets: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TARGETS),
        description="Standard os/arch matrix",
    )
    compat_targets: list[str] = Field(
        default_factory=lambda: list(DEFAULT_COMPAT_TARGETS),
        description="Statically linked builds for library-incompatible distributions",
    )
    build_flags: list[str] = Field(
        default_factory=list,
        description="Extra arguments placed between `go build` and `-o`",
    )

    @field_validator("targets", "compat_targets")
    @classmethod
    def _check_targets(cls, value: list[str]) -> list[str]:
        parse_targets(value)
        return value

    def parsed_targets(self) -> list[Target]:
        return parse_targets(self.targets)

    def parsed_compat_targets(self) -> list[Target]:
        return parse_targets(self.compat_targets)


class SigningConfig(BaseModel):
    """Detached GPG signature over the checksum manifest."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    enabled: bool = Field(default=True, description="Attempt to sign at all")
    gpg_binary: str = Field(default="gpg", description="GnuPG executable")
    key_id: Optional[str] = Field(
        default=None,
        description="Key passed as --local-user; GnuPG's default key when unset",
    )


class PublishConfig(BaseModel):
    """GitHub release publishing through the gh CLI."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    enabled: bool = Field(default=True, description="Publish after packaging")
    gh_binary: str = Field(default="gh", description="GitHub CLI executable")
    repository: Optional[str] = Field(
        default=None,
        description="OWNER/REPO passed as --repo; gh infers it from the checkout when unset",
    )
    tag_prefix: str = Field(default="v", description="Prepended to the version to form the tag")
    notes: Optional[str] = Field(
        default=None,
        description="Release notes; defaults to '<provider description> v<version>'",
    )


class ReleaseConfig(BaseModel):
    """
    Top-level config container.

    All sections are optional in YAML; a missing section takes its defaults.
    """

    model_config = ConfigDict(
        frozen=True, extra="forbid", validate_default=True, populate_by_name=True
    )

    global_config: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    signing: SigningConfig = Field(default_factory=SigningConfig)
    publish: PublishConfig = Field(default_factory=PublishConfig)

    def with_version(self, version: str) -> "ReleaseConfig":
        """Return a copy releasing a different version (validated like the YAML field)."""
        provider = ProviderConfig.model_validate(
            {**self.provider.model_dump(), "version": version}
        )
        return self.model_copy(update={"provider": provider})

    def release_notes(self) -> str:
        if self.publish.notes:
            return self.publish.notes
        return f"{self.provider.description} v{self.provider.version}"
