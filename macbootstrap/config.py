from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from .errors import ConfigMalformed, ConfigMissing
from .lib.env import ENV_ALLOW_LIST, PATHS

REQUIRED_SECTIONS = ("settings", "applications")

NOT_SPECIFIED = "not specified"

DEFAULT_RELEASE_API_URL = "https://api.github.com/repos/nextcloud/desktop/releases/latest"

_PLACEHOLDER_RE = re.compile(r"\$(?:\{([A-Za-z_][A-Za-z0-9_]*)\}|([A-Za-z_][A-Za-z0-9_]*))")

# Keys tried, in order, when a setting is written as a mapping (e.g. {path: ...}).
_SETTING_VALUE_KEYS = ("path", "url", "command", "value")


def expand_placeholders(raw: str, variables: Mapping[str, str]) -> str:
    """Substitute ``${NAME}`` / ``$NAME`` references from ``variables``.

    Unknown names are left untouched so callers can spot them. Nothing is
    evaluated: the grammar is closed.
    """

    def _sub(m: "re.Match[str]") -> str:
        name = m.group(1) or m.group(2)
        if name in variables:
            return variables[name]
        return m.group(0)

    return _PLACEHOLDER_RE.sub(_sub, raw)


def has_placeholder(value: str) -> bool:
    return _PLACEHOLDER_RE.search(value) is not None


class PackageKind(str, Enum):
    MANAGED = "managed"
    NATIVE = "native"

    @classmethod
    def from_type(cls, value: Any) -> "PackageKind":
        # The document says "homebrew"; anything that is not "native" is brew-managed.
        if str(value or "").strip().lower() == cls.NATIVE.value:
            return cls.NATIVE
        return cls.MANAGED


@dataclass(frozen=True)
class PackageSpec:
    name: str
    kind: PackageKind = PackageKind.MANAGED
    install_directory: Optional[str] = None


@dataclass(frozen=True)
class FileCopySpec:
    label: str
    source: str
    destination: str
    permissions: str


@dataclass(frozen=True)
class DownloadSpec:
    label: str
    source: str
    destination: str


@dataclass(frozen=True)
class ExtensionSpec:
    identifier: str


@dataclass(frozen=True)
class Settings:
    values: Mapping[str, str]
    home: str

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        v = self.values.get(name)
        if v is None or not str(v).strip():
            return default
        return str(v)

    def _home(self, rel: str) -> str:
        if rel.startswith("~/"):
            return os.path.join(self.home, rel[2:])
        return rel

    def _path(self, name: str, default: str) -> str:
        return self.get(name) or self._home(default)

    @property
    def variables(self) -> Dict[str, str]:
        """Names usable as placeholders in package/copy/download entries."""
        return {name.upper(): value for name, value in self.values.items()}

    @property
    def init_repo_url(self) -> Optional[str]:
        return self.get("initrepo")

    @property
    def target_dir(self) -> str:
        return self._path("target_dir", "~/init")

    @property
    def xdg_config_home(self) -> str:
        return self._path("xdg_config_home", "~/.config")

    @property
    def zdotdir(self) -> str:
        return self.get("zdotdir") or os.path.join(self.xdg_config_home, "zsh")

    @property
    def git_dir(self) -> str:
        return self.get("git_dir") or os.path.join(self.xdg_config_home, "git")

    @property
    def release_api_url(self) -> str:
        return self.get("git_api_url") or DEFAULT_RELEASE_API_URL

    @property
    def homebrew_dir(self) -> str:
        return self._path("homebrew_dir", PATHS.homebrew_dir_default)

    @property
    def brew_cmd(self) -> str:
        return self.get("brew_cmd") or os.path.join(self.homebrew_dir, "bin", "brew")

    @property
    def homebrew_tarball_url(self) -> str:
        return self.get("homebrew_tarball_url") or PATHS.homebrew_tarball_url

    @property
    def log_file(self) -> str:
        return self._path("log_file", PATHS.log_default)

    @property
    def recording_log(self) -> str:
        return self._path("recording_log", PATHS.recording_log_default)

    @property
    def marker_file(self) -> str:
        return self._path("init_template_marker_file", PATHS.marker_default)

    @property
    def homebrew_marker_file(self) -> str:
        return self._path("homebrew_marker_file", PATHS.homebrew_marker_default)

    @property
    def applications_dir(self) -> str:
        return self._path("applications_dir", "~/Applications")

    @property
    def downloads_dir(self) -> str:
        return self._path("downloads_dir", "~/Downloads")

    @property
    def wallpaper(self) -> str:
        return self._path("wallpaper", "~/Pictures/wallpaper_test.png")

    @property
    def code_cmd(self) -> str:
        return self.get("vscode_cmd") or "code"

    @property
    def zshenv_file(self) -> str:
        return self._path("zshenv", "~/.zshenv")

    @property
    def zshenv_template(self) -> str:
        return self.get("zshenv_template") or os.path.join(self.target_dir, "zsh", ".zshenv")

    @property
    def bootstrap_script(self) -> str:
        return self._path("bootstrap_script", PATHS.bootstrap_script_default)


@dataclass(frozen=True)
class DesiredState:
    settings: Settings
    packages: Tuple[PackageSpec, ...] = ()
    file_copies: Tuple[FileCopySpec, ...] = ()
    downloads: Tuple[DownloadSpec, ...] = ()
    extensions: Tuple[ExtensionSpec, ...] = ()
    source_path: Optional[str] = None
    unresolved: Tuple[str, ...] = field(default=())


def _setting_value(name: str, raw: Any) -> str:
    if isinstance(raw, dict):
        for key in _SETTING_VALUE_KEYS:
            if key in raw and raw[key] is not None:
                return str(raw[key])
        scalars = [v for v in raw.values() if not isinstance(v, (dict, list))]
        if not scalars:
            raise ConfigMalformed(f"settings.{name} has no scalar value")
        return str(scalars[0])
    if isinstance(raw, (list, tuple)):
        raise ConfigMalformed(f"settings.{name} must be a scalar or a mapping")
    return "" if raw is None else str(raw)


def _allowed_environ(environ: Mapping[str, str]) -> Dict[str, str]:
    env = {k: environ[k] for k in ENV_ALLOW_LIST if k in environ}
    env.setdefault("HOME", str(Path.home()))
    return env


def resolve_settings(raw: Mapping[str, Any], environ: Mapping[str, str]) -> Settings:
    """Resolve settings in declaration order against prior settings and the env allow-list."""

    env = _allowed_environ(environ)
    resolved: Dict[str, str] = {}
    variables: Dict[str, str] = dict(env)

    for name, value in raw.items():
        text = expand_placeholders(_setting_value(str(name), value), variables).strip()
        resolved[str(name)] = text
        variables[str(name).upper()] = text

    return Settings(values=resolved, home=env["HOME"])


def _section_list(raw: Mapping[str, Any], key: str) -> List[Any]:
    section = raw.get(key)
    if section is None:
        return []
    if not isinstance(section, list):
        raise ConfigMalformed(f"{key} must be a list")
    return section


def _require(entry: Any, key: str, where: str) -> str:
    if not isinstance(entry, dict):
        raise ConfigMalformed(f"{where} must be a mapping")
    value = entry.get(key)
    if value is None or not str(value).strip():
        raise ConfigMalformed(f"{where}.{key} is required")
    return str(value)


def _download_entries(raw: Mapping[str, Any]) -> List[Tuple[str, Any]]:
    section = raw.get("downloads")
    if section is None:
        return []
    if isinstance(section, dict):
        return [(str(k), v) for k, v in section.items()]
    if isinstance(section, list):
        return [(str(i), v) for i, v in enumerate(section)]
    raise ConfigMalformed("downloads must be a list or a mapping")


def load_config(path: str, *, environ: Optional[Mapping[str, str]] = None) -> DesiredState:
    p = Path(path).expanduser()
    if not p.is_file():
        raise ConfigMissing(f"Config document not found: {p}")

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigMalformed(f"{p}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigMalformed(f"{p} must contain a mapping/object")

    missing = [k for k in REQUIRED_SECTIONS if k not in raw]
    if missing:
        raise ConfigMalformed(f"{p} is missing required section(s): {', '.join(missing)}")

    if not isinstance(raw["settings"], dict):
        raise ConfigMalformed("settings must be a mapping")

    settings = resolve_settings(raw["settings"], os.environ if environ is None else environ)
    variables = dict(_allowed_environ(os.environ if environ is None else environ))
    variables.update(settings.variables)

    unresolved: List[str] = []

    def expand(value: Any) -> str:
        text = expand_placeholders(str(value), variables).strip()
        if has_placeholder(text):
            unresolved.append(text)
        return text

    packages: List[PackageSpec] = []
    for i, entry in enumerate(_section_list(raw, "applications")):
        name = _require(entry, "name", f"applications[{i}]").strip()
        directory = entry.get("directory")
        install_directory = None
        if directory is not None and str(directory).strip() and str(directory).strip() != NOT_SPECIFIED:
            install_directory = expand(directory)
        packages.append(
            PackageSpec(name=name, kind=PackageKind.from_type(entry.get("type")), install_directory=install_directory)
        )

    copies: List[FileCopySpec] = []
    for i, entry in enumerate(_section_list(raw, "init_list")):
        where = f"init_list[{i}]"
        copies.append(
            FileCopySpec(
                label=str(entry.get("name") or i) if isinstance(entry, dict) else str(i),
                source=expand(_require(entry, "source", where)),
                destination=expand(_require(entry, "destination", where)),
                permissions=expand(_require(entry, "permissions", where)),
            )
        )

    downloads: List[DownloadSpec] = []
    for key, entry in _download_entries(raw):
        where = f"downloads[{key}]"
        downloads.append(
            DownloadSpec(
                label=expand(entry.get("name") or key) if isinstance(entry, dict) else key,
                source=expand(_require(entry, "source", where)),
                destination=expand(_require(entry, "destination", where)),
            )
        )

    extensions: List[ExtensionSpec] = []
    for i, entry in enumerate(_section_list(raw, "vscode-extensions")):
        ident = _require(entry, "name", f"vscode-extensions[{i}]") if isinstance(entry, dict) else str(entry or "")
        if not ident.strip():
            raise ConfigMalformed(f"vscode-extensions[{i}] is empty")
        extensions.append(ExtensionSpec(identifier=ident.strip()))

    return DesiredState(
        settings=settings,
        packages=tuple(packages),
        file_copies=tuple(copies),
        downloads=tuple(downloads),
        extensions=tuple(extensions),
        source_path=str(p),
        unresolved=tuple(unresolved),
    )
