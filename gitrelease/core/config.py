"""Typed configuration loading, merging and persistence.

The configuration lives in ``.gitrelease.json`` at the repository root.
Stored values are deep-merged over the defaults below, so a partial file
(or no file at all) always yields a complete :class:`Config`.
"""

from __future__ import annotations

import copy
import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from gitrelease.platform.files import atomic_write_text

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_int,
    get_raw_str,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "CONFIG_FILENAME",
    "ArtifactsConfig",
    "Config",
    "ConfigError",
    "ReleaseConfig",
    "RepositoryConfig",
    "VerificationConfig",
    "VersioningConfig",
    "WorkflowConfig",
    "deep_merge",
    "default_config_dict",
    "init_config",
    "load_config",
    "save_config",
    "unknown_keys",
    "update_config",
]

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".gitrelease.json"

DEFAULT_STAGES = ("development", "testing", "staging", "production")
DEFAULT_CI_CHECKS = ("lint", "build", "test")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded, updated or written."""

    message: str
    path: Path | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class RepositoryConfig:
    """Repository identity and branch naming prefixes."""

    name: str = ""
    remote_url: str = ""
    main_branch: str = "main"
    release_branch: str = "release"
    hotfix_prefix: str = "hotfix/"
    feature_prefix: str = "feature/"
    release_prefix: str = "release/"


@dataclass(frozen=True, slots=True)
class VersioningConfig:
    pattern: str = "semver"
    custom_pattern: str = ""
    initial_version: str = "0.1.0"


@dataclass(frozen=True, slots=True)
class WorkflowConfig:
    """Ordered release stages and workflow policy.

    ``stages`` is order-significant and must not contain duplicates.
    """

    stages: tuple[str, ...] = DEFAULT_STAGES
    required_approvals: int = 2
    enforce_linear_history: bool = True
    require_clean_work_dir: bool = True


@dataclass(frozen=True, slots=True)
class VerificationConfig:
    required_tests: bool = True
    required_reviews: bool = True
    required_ci_checks: tuple[str, ...] = DEFAULT_CI_CHECKS
    enforce_conventional_commits: bool = True


@dataclass(frozen=True, slots=True)
class ArtifactsConfig:
    generate_sbom: bool = True
    save_assets: bool = True
    asset_path: str = "./dist"


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    generate_changelog: bool = True
    tag_prefix: str = "v"
    create_github_release: bool = True
    artifacts: ArtifactsConfig = field(default_factory=ArtifactsConfig)


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    repository: RepositoryConfig = field(default_factory=RepositoryConfig)
    versioning: VersioningConfig = field(default_factory=VersioningConfig)
    workflow: WorkflowConfig = field(default_factory=WorkflowConfig)
    verification: VerificationConfig = field(default_factory=VerificationConfig)
    release: ReleaseConfig = field(default_factory=ReleaseConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed JSON).

        Missing or mistyped values fall back to the defaults.
        """
        repository: StrDict = get_table(data, "repository") or {}
        versioning: StrDict = get_table(data, "versioning") or {}
        workflow: StrDict = get_table(data, "workflow") or {}
        verification: StrDict = get_table(data, "verification") or {}
        release: StrDict = get_table(data, "release") or {}
        artifacts: StrDict = get_table(release, "artifacts") or {}

        repo_d = RepositoryConfig()
        ver_d = VersioningConfig()
        wf_d = WorkflowConfig()
        chk_d = VerificationConfig()
        rel_d = ReleaseConfig()
        art_d = ArtifactsConfig()

        stages = get_str_list(workflow, "stages")
        ci_checks = get_str_list(verification, "required_ci_checks")

        return cls(
            repository=RepositoryConfig(
                name=_str_or(repository, "name", repo_d.name),
                remote_url=_str_or(repository, "remote_url", repo_d.remote_url),
                main_branch=get_str(repository, "main_branch") or repo_d.main_branch,
                release_branch=get_str(repository, "release_branch") or repo_d.release_branch,
                hotfix_prefix=_str_or(repository, "hotfix_prefix", repo_d.hotfix_prefix),
                feature_prefix=_str_or(repository, "feature_prefix", repo_d.feature_prefix),
                release_prefix=_str_or(repository, "release_prefix", repo_d.release_prefix),
            ),
            versioning=VersioningConfig(
                pattern=get_str(versioning, "pattern") or ver_d.pattern,
                custom_pattern=_str_or(versioning, "custom_pattern", ver_d.custom_pattern),
                initial_version=get_str(versioning, "initial_version") or ver_d.initial_version,
            ),
            workflow=WorkflowConfig(
                stages=tuple(stages) if stages is not None else wf_d.stages,
                required_approvals=_int_or(workflow, "required_approvals", wf_d.required_approvals),
                enforce_linear_history=_bool_or(
                    workflow, "enforce_linear_history", wf_d.enforce_linear_history
                ),
                require_clean_work_dir=_bool_or(
                    workflow, "require_clean_work_dir", wf_d.require_clean_work_dir
                ),
            ),
            verification=VerificationConfig(
                required_tests=_bool_or(verification, "required_tests", chk_d.required_tests),
                required_reviews=_bool_or(verification, "required_reviews", chk_d.required_reviews),
                required_ci_checks=(
                    tuple(dict.fromkeys(ci_checks))
                    if ci_checks is not None
                    else chk_d.required_ci_checks
                ),
                enforce_conventional_commits=_bool_or(
                    verification, "enforce_conventional_commits", chk_d.enforce_conventional_commits
                ),
            ),
            release=ReleaseConfig(
                generate_changelog=_bool_or(
                    release, "generate_changelog", rel_d.generate_changelog
                ),
                tag_prefix=_str_or(release, "tag_prefix", rel_d.tag_prefix),
                create_github_release=_bool_or(
                    release, "create_github_release", rel_d.create_github_release
                ),
                artifacts=ArtifactsConfig(
                    generate_sbom=_bool_or(artifacts, "generate_sbom", art_d.generate_sbom),
                    save_assets=_bool_or(artifacts, "save_assets", art_d.save_assets),
                    asset_path=get_str(artifacts, "asset_path") or art_d.asset_path,
                ),
            ),
        )

    def to_dict(self) -> StrDict:
        """Serialise to the on-disk JSON shape."""
        return {
            "repository": {
                "name": self.repository.name,
                "remote_url": self.repository.remote_url,
                "main_branch": self.repository.main_branch,
                "release_branch": self.repository.release_branch,
                "hotfix_prefix": self.repository.hotfix_prefix,
                "feature_prefix": self.repository.feature_prefix,
                "release_prefix": self.repository.release_prefix,
            },
            "versioning": {
                "pattern": self.versioning.pattern,
                "custom_pattern": self.versioning.custom_pattern,
                "initial_version": self.versioning.initial_version,
            },
            "workflow": {
                "stages": list(self.workflow.stages),
                "required_approvals": self.workflow.required_approvals,
                "enforce_linear_history": self.workflow.enforce_linear_history,
                "require_clean_work_dir": self.workflow.require_clean_work_dir,
            },
            "verification": {
                "required_tests": self.verification.required_tests,
                "required_reviews": self.verification.required_reviews,
                "required_ci_checks": list(self.verification.required_ci_checks),
                "enforce_conventional_commits": self.verification.enforce_conventional_commits,
            },
            "release": {
                "generate_changelog": self.release.generate_changelog,
                "tag_prefix": self.release.tag_prefix,
                "create_github_release": self.release.create_github_release,
                "artifacts": {
                    "generate_sbom": self.release.artifacts.generate_sbom,
                    "save_assets": self.release.artifacts.save_assets,
                    "asset_path": self.release.artifacts.asset_path,
                },
            },
        }


def _str_or(table: Mapping[str, object], key: str, default: str) -> str:
    value = get_raw_str(table, key)
    return default if value is None else value


def _bool_or(table: Mapping[str, object], key: str, default: bool) -> bool:
    value = get_bool(table, key)
    return default if value is None else value


def _int_or(table: Mapping[str, object], key: str, default: int) -> int:
    value = get_int(table, key)
    return default if value is None else value


def default_config_dict() -> StrDict:
    """The defaults in their on-disk shape."""
    return Config().to_dict()


def deep_merge(base: Mapping[str, object], override: Mapping[str, object]) -> StrDict:
    """Merge ``override`` into ``base`` recursively, returning a new dict.

    Tables are merged key by key; any other value in ``override`` (lists
    included) replaces the base value. Neither input is modified.
    """
    merged: StrDict = copy.deepcopy(dict(base))
    for key, value in override.items():
        base_table = as_str_dict(merged.get(key))
        override_table = as_str_dict(value)
        if base_table is not None and override_table is not None:
            merged[key] = deep_merge(base_table, override_table)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def unknown_keys(data: Mapping[str, object]) -> list[str]:
    """Dotted paths in ``data`` that the schema does not define.

    Unknown keys are ignored on load, so a misspelt or camelCase key would
    otherwise silently fall back to its default.
    """
    return _unknown(data, default_config_dict(), "")


def _unknown(data: Mapping[str, object], schema: Mapping[str, object], prefix: str) -> list[str]:
    found: list[str] = []
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if key not in schema:
            found.append(dotted)
            continue
        sub_data = as_str_dict(value)
        sub_schema = as_str_dict(schema[key])
        if sub_data is not None and sub_schema is not None:
            found.extend(_unknown(sub_data, sub_schema, f"{dotted}."))
    return found


def _snake_case(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _warn_unknown(stored: Mapping[str, object], path: Path) -> None:
    defaults = default_config_dict()
    for dotted in unknown_keys(stored):
        *parents, leaf = dotted.split(".")
        suggestion = ".".join([*parents, _snake_case(leaf)])
        hint = ""
        if suggestion != dotted and _lookup(defaults, suggestion.split(".")) is not None:
            hint = f" (did you mean {suggestion}?)"
        logger.warning("%s: ignoring unknown config key %s%s", path, dotted, hint)


def _validate(config: Config, path: Path | None) -> Result[Config, ConfigError]:
    stages = config.workflow.stages
    if not stages:
        return Err(ConfigError("workflow.stages must not be empty", path=path))
    if len(set(stages)) != len(stages):
        return Err(ConfigError("workflow.stages must not contain duplicates", path=path))
    if config.workflow.required_approvals < 0:
        return Err(ConfigError("workflow.required_approvals must be >= 0", path=path))
    return Ok(config)


def _read_stored(path: Path) -> Result[StrDict, ConfigError]:
    """Read the stored (partial) config; a missing file reads as empty."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Ok({})
    except OSError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(ConfigError(f"Invalid JSON syntax: {e}", path=path))

    data = as_str_dict(obj)
    if data is None:
        return Err(ConfigError("Config root must be a JSON object", path=path))
    return Ok(data)


def load_config_dict(path: Path) -> Result[StrDict, ConfigError]:
    """Load the stored config merged over the defaults, as a plain dict."""
    stored = _read_stored(path)
    if isinstance(stored, Err):
        return stored
    _warn_unknown(stored.value, path)
    return Ok(deep_merge(default_config_dict(), stored.value))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load configuration from ``path``, merged over the defaults.

    Args:
        path: Path to the JSON config file (may not exist)

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    merged = load_config_dict(path)
    if isinstance(merged, Err):
        return merged
    return _validate(Config.from_dict(merged.value), path)


def save_config(path: Path, config: Config) -> Result[Config, ConfigError]:
    """Rewrite the whole config file."""
    content = json.dumps(config.to_dict(), indent=2) + "\n"
    try:
        atomic_write_text(path, content, encoding="utf-8")
    except OSError as e:
        return Err(ConfigError(f"Failed to write config: {e}", path=path))
    return Ok(config)


def init_config(path: Path, overrides: Mapping[str, object]) -> Result[Config, ConfigError]:
    """Write defaults merged with ``overrides`` to ``path``."""
    merged = deep_merge(default_config_dict(), overrides)
    validated = _validate(Config.from_dict(merged), path)
    if isinstance(validated, Err):
        return validated
    return save_config(path, validated.value)


def update_config(path: Path, dotted: str, raw_value: str) -> Result[Config, ConfigError]:
    """Set one leaf addressed by a dotted path and rewrite the file.

    The raw string is coerced to the type of the default at that path:
    ``true``/``false`` for booleans, integers, comma-separated lists.
    Paths that do not exist in the schema are rejected.
    """
    keys = dotted.split(".")
    if not dotted or any(not k for k in keys):
        return Err(ConfigError(f"Invalid config path: {dotted!r}", path=path))

    default_leaf = _lookup(default_config_dict(), keys)
    if default_leaf is None or as_str_dict(default_leaf) is not None:
        return Err(
            ConfigError(
                f"Unknown config path: {dotted}",
                path=path,
                hint="run 'gitrelease config show' to list the available keys",
            )
        )

    coerced = _coerce(raw_value, default_leaf)
    if isinstance(coerced, Err):
        return Err(ConfigError(f"{dotted}: {coerced.error}", path=path))

    current = load_config_dict(path)
    if isinstance(current, Err):
        return current

    updated = _set_path(current.value, keys, coerced.value)
    validated = _validate(Config.from_dict(updated), path)
    if isinstance(validated, Err):
        return validated
    return save_config(path, validated.value)


def _lookup(data: Mapping[str, object], keys: list[str]) -> object | None:
    node: object = data
    for key in keys:
        table = as_str_dict(node)
        if table is None or key not in table:
            return None
        node = table[key]
    return node


def _set_path(data: Mapping[str, object], keys: list[str], value: object) -> StrDict:
    head, *rest = keys
    out: StrDict = dict(data)
    if not rest:
        out[head] = value
        return out
    out[head] = _set_path(as_str_dict(out.get(head)) or {}, rest, value)
    return out


_TRUE = {"true", "yes", "on", "1"}
_FALSE = {"false", "no", "off", "0"}


def _coerce(raw: str, like: object) -> Result[object, str]:
    if isinstance(like, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE:
            return Ok(True)
        if lowered in _FALSE:
            return Ok(False)
        return Err(f"expected a boolean, got {raw!r}")
    if isinstance(like, int):
        try:
            return Ok(int(raw.strip()))
        except ValueError:
            return Err(f"expected an integer, got {raw!r}")
    if isinstance(like, list):
        return Ok([item.strip() for item in raw.split(",") if item.strip()])
    return Ok(raw)
