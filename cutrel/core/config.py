"""Typed configuration loading.

The optional ``release.toml`` at the root of the working copy is parsed into
frozen dataclasses. Every key has a default, so a project without the file
releases with the sbt-based defaults below.

Example:
    [remote]
    server = "downloads.example.org"
    path = "/srv/www/releases/mylib"

    [build]
    test = ["sbt", "+test", "it:test"]

    [toolchain]
    version = "1.8"
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_argv, get_str, get_table

__all__ = [
    "BuildConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "PreflightConfig",
    "ReleaseConfig",
    "RemoteConfig",
    "ToolchainConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = "release.toml"

_DOTTED_VERSION = re.compile(r"^\d+(\.\d+)*$")

DEFAULT_SERVER = "downloads.internal"
DEFAULT_PATH = "/srv/www/releases"
DEFAULT_GIT_REMOTE = "origin"
DEFAULT_DOWNLOADS_DIR = "downloads"
DEFAULT_ARTIFACTS_DIR = "target/release"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class RemoteConfig:
    """Publish destination and version-control remote."""

    server: str = DEFAULT_SERVER
    path: str = DEFAULT_PATH
    git_remote: str = DEFAULT_GIT_REMOTE
    downloads_dir: str = DEFAULT_DOWNLOADS_DIR


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Command lines for the external build tool.

    ``publish_options`` are spliced right after the executable of ``build``
    on a real run.
    """

    version: tuple[str, ...] = ("sbt", "--error", "print version")
    clean: tuple[str, ...] = ("sbt", "clean")
    test: tuple[str, ...] = ("sbt", "+test")
    build: tuple[str, ...] = ("sbt", "+package")
    compat: tuple[str, ...] = ("sbt", "+mimaReportBinaryIssues")
    upload: tuple[str, ...] = ("sbt", "+publish")
    publish_options: tuple[str, ...] = ("-Drelease.publish=true",)
    artifacts_dir: str = DEFAULT_ARTIFACTS_DIR

    @property
    def executable(self) -> str:
        return self.build[0]


@dataclass(frozen=True, slots=True)
class ToolchainConfig:
    """Toolchain that must be active (e.g. the JDK used by the build)."""

    command: tuple[str, ...] = ("java", "-version")
    version: str = "17.0"


@dataclass(frozen=True, slots=True)
class PreflightConfig:
    """Extra executables that must be on PATH."""

    tools: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Main configuration container."""

    remote: RemoteConfig = field(default_factory=RemoteConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    toolchain: ToolchainConfig = field(default_factory=ToolchainConfig)
    preflight: PreflightConfig = field(default_factory=PreflightConfig)

    @property
    def required_tools(self) -> tuple[str, ...]:
        """All executables the release needs, in check order, deduplicated."""
        names = [
            "git",
            "ssh",
            "rsync",
            self.build.executable,
            self.toolchain.command[0],
            *self.preflight.tools,
        ]
        return tuple(dict.fromkeys(names))

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create config from a mapping (parsed TOML).

        Raises:
            ValueError: If a command line entry or the toolchain version is
                malformed.
        """
        remote: StrDict = get_table(data, "remote") or {}
        build: StrDict = get_table(data, "build") or {}
        toolchain: StrDict = get_table(data, "toolchain") or {}
        preflight: StrDict = get_table(data, "preflight") or {}

        defaults = BuildConfig()
        publish_options = build.get("publish_options")

        return cls(
            remote=RemoteConfig(
                server=get_str(remote, "server") or DEFAULT_SERVER,
                path=get_str(remote, "path") or DEFAULT_PATH,
                git_remote=get_str(remote, "git_remote") or DEFAULT_GIT_REMOTE,
                downloads_dir=get_str(remote, "downloads_dir") or DEFAULT_DOWNLOADS_DIR,
            ),
            build=BuildConfig(
                version=get_argv(build, "version") or defaults.version,
                clean=get_argv(build, "clean") or defaults.clean,
                test=get_argv(build, "test") or defaults.test,
                build=get_argv(build, "build") or defaults.build,
                compat=get_argv(build, "compat") or defaults.compat,
                upload=get_argv(build, "upload") or defaults.upload,
                # An explicit empty list disables the real-run options.
                publish_options=(
                    ()
                    if publish_options == []
                    else get_argv(build, "publish_options") or defaults.publish_options
                ),
                artifacts_dir=get_str(build, "artifacts_dir") or DEFAULT_ARTIFACTS_DIR,
            ),
            toolchain=ToolchainConfig(
                command=get_argv(toolchain, "command") or ToolchainConfig().command,
                version=_dotted_version(get_str(toolchain, "version"))
                or ToolchainConfig().version,
            ),
            preflight=PreflightConfig(
                tools=get_argv(preflight, "tools") or (),
            ),
        )


def _dotted_version(value: str | None) -> str | None:
    if value is not None and not _DOTTED_VERSION.match(value):
        raise ValueError(f"toolchain.version must be dotted integers like \"17.0\", got {value!r}")
    return value


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to release.toml

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaseConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(
            ConfigError(
                f"Invalid config structure: {e}",
                path=path,
                hint="Command lines are TOML arrays, e.g. clean = [\"sbt\", \"clean\"]",
            )
        )


def load_config_or_default(root: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load ``release.toml`` from root, or defaults when the file is absent."""
    path = root / CONFIG_FILENAME
    if not path.exists():
        return Ok(ReleaseConfig())
    return load_config(path)
