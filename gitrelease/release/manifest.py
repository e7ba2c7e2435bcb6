"""Dependency manifest reading for the SBOM.

Declared dependencies are collected from ``pyproject.toml`` (PEP 621
``[project].dependencies`` or Poetry's ``[tool.poetry.dependencies]``) and
from ``package.json`` when the project ships one. Versions are simplified to
the first dotted number in the requirement (``>=2.31,<3`` becomes ``2.31``).
"""

from __future__ import annotations

import json
import re
import tomllib
from dataclasses import dataclass
from pathlib import Path

from gitrelease.core.result import Err, Ok, Result
from gitrelease.core.structured import StrDict, as_str_dict, get_str_list, get_table
from gitrelease.release.errors import ReleaseError

_REQUIREMENT_RE = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)\s*(?:\[[^\]]*\])?\s*(.*)$")
_VERSION_RE = re.compile(r"\d+(?:\.\d+)*")


@dataclass(frozen=True, slots=True)
class Dependency:
    name: str
    version: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "version": self.version}


def simplify_version(specifier: str) -> str:
    m = _VERSION_RE.search(specifier)
    return m.group(0) if m else ""


def parse_requirement(requirement: str) -> Dependency | None:
    """Parse a PEP 508 requirement string; environment markers are ignored."""
    specifier = requirement.split(";", 1)[0]
    m = _REQUIREMENT_RE.match(specifier)
    if m is None:
        return None
    return Dependency(name=m.group(1), version=simplify_version(m.group(2)))


def _from_pyproject(data: StrDict) -> list[Dependency]:
    deps: list[Dependency] = []

    project = get_table(data, "project") or {}
    for requirement in get_str_list(project, "dependencies") or []:
        dep = parse_requirement(requirement)
        if dep is not None:
            deps.append(dep)

    poetry = get_table(get_table(data, "tool") or {}, "poetry") or {}
    for name, value in (get_table(poetry, "dependencies") or {}).items():
        if name == "python":
            continue
        table = as_str_dict(value)
        raw = value if isinstance(value, str) else str((table or {}).get("version", ""))
        deps.append(Dependency(name=name, version=simplify_version(raw)))

    return deps


def _from_package_json(data: StrDict) -> list[Dependency]:
    deps = get_table(data, "dependencies") or {}
    return [
        Dependency(name=name, version=simplify_version(value))
        for name, value in deps.items()
        if isinstance(value, str)
    ]


def read_dependencies(root: Path) -> Result[tuple[Dependency, ...], ReleaseError]:
    """Collect declared dependencies of the project at ``root``.

    A project without any manifest has no dependencies; a manifest that
    cannot be parsed is an error.
    """
    deps: list[Dependency] = []

    pyproject = root / "pyproject.toml"
    if pyproject.is_file():
        try:
            data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as e:
            return Err(
                ReleaseError(
                    kind="io_failed",
                    message=f"failed to read pyproject.toml: {e}",
                    hint=str(pyproject),
                )
            )
        deps += _from_pyproject(data)

    package_json = root / "package.json"
    if package_json.is_file():
        try:
            obj: object = json.loads(package_json.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            return Err(
                ReleaseError(
                    kind="io_failed",
                    message=f"failed to read package.json: {e}",
                    hint=str(package_json),
                )
            )
        deps += _from_package_json(as_str_dict(obj) or {})

    return Ok(tuple(deps))
