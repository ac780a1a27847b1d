"""Minimal reader for Ivy settings documents.

Only the parts of ``ivysettings.xml`` that influence where the resolver keeps
its resolution cache are interpreted: variables (``<property>``,
``<properties>``), nested documents (``<include>``), ``<settings>`` and
``<caches>``. Everything else, resolvers and modules included, is ignored.
"""

from __future__ import annotations

import getpass
import logging
from pathlib import Path

import javaproperties
from lxml import etree

from .exceptions import CacheRootUnavailable
from .variables import BaseSource, OverlaySource, VariableSource, substitute


logger = logging.getLogger(__name__)

_ROOT_TAGS = frozenset({"ivysettings", "ivyconf"})
_MAX_INCLUDE_DEPTH = 16


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() == "true"


class IvySettings:
    """Variables and cache locations gathered from settings sources."""

    def __init__(
        self,
        variables: VariableSource | None = None,
        *,
        basedir: Path | str | None = None,
    ) -> None:
        self.variables: VariableSource = variables if variables is not None else BaseSource()
        self.basedir = Path(basedir if basedir is not None else Path.cwd()).absolute()
        self.default_branch: str | None = None
        self.default_cache_dir: Path | None = None
        self.resolution_cache_dir: Path | None = None
        self._add_builtin_variables()

    def _add_builtin_variables(self) -> None:
        self.set_variable("ivy.basedir", str(self.basedir))
        self.set_variable("user.home", str(Path.home()), overwrite=False)
        self.set_variable("user.dir", str(self.basedir), overwrite=False)
        try:
            user_name = getpass.getuser()
        except (KeyError, OSError):
            user_name = ""
        if user_name:
            self.set_variable("user.name", user_name, overwrite=False)

    def _add_default_locations(self) -> None:
        # Seeded at load time so an ivy.home given beforehand is honoured.
        self.set_variable("ivy.default.ivy.user.dir", str(self.ivy_user_dir), overwrite=False)

    # ----------------------------------------------------------------- variables

    def get_variable(self, name: str) -> str | None:
        return self.variables.resolve(name)

    def set_variable(self, name: str, value: str, *, overwrite: bool = True) -> None:
        """Store a variable after expanding references to already known ones."""
        self.variables.set(name, substitute(value, self.variables), overwrite=overwrite)

    def substitute(self, text: str) -> str:
        return substitute(text, self.variables)

    def set_environment_prefix(self, prefix: str) -> None:
        if isinstance(self.variables, OverlaySource):
            self.variables.prefix = prefix
        else:
            logger.debug("Ignoring environment prefix '%s' for a plain variable source", prefix)

    def load_properties(self, path: Path | str, *, overwrite: bool = True) -> None:
        """Load a Java ``.properties`` file into the variable source."""
        with Path(path).open("rb") as handle:
            properties = javaproperties.load(handle)
        for name, value in properties.items():
            self.set_variable(name, value, overwrite=overwrite)

    # ------------------------------------------------------------------ loading

    def load(self, path: Path | str) -> None:
        """Load a settings document from disk."""
        self._add_default_locations()
        settings_path = Path(path).absolute()
        self.set_variable("ivy.settings.file", str(settings_path))
        self.set_variable("ivy.settings.dir", str(settings_path.parent))
        self.set_variable("ivy.settings.url", settings_path.as_uri())
        self._parse(settings_path, depth=0)

    def load_default(self) -> None:
        """Apply built-in defaults, which leave every cache location implicit."""
        self._add_default_locations()
        logger.debug("No settings document given, using built-in defaults")

    def _parse(self, path: Path, *, depth: int) -> None:
        if depth > _MAX_INCLUDE_DEPTH:
            raise CacheRootUnavailable(f"Settings includes nested too deeply at '{path}'")
        try:
            tree = etree.parse(str(path))
        except (etree.XMLSyntaxError, OSError) as exc:
            raise CacheRootUnavailable(f"Unable to parse settings '{path}': {exc}") from exc

        root = tree.getroot()
        if root.tag not in _ROOT_TAGS:
            raise CacheRootUnavailable(
                f"Unexpected root element <{root.tag}> in settings '{path}'"
            )

        for element in root:
            if not isinstance(element.tag, str):
                continue
            attributes = {key: self.substitute(value) for key, value in element.attrib.items()}
            match element.tag:
                case "property":
                    self._handle_property(attributes)
                case "properties":
                    self._handle_properties(attributes, path.parent)
                case "include":
                    self._handle_include(attributes, path.parent, depth)
                case "settings" | "conf":
                    self._handle_settings(attributes)
                case "caches":
                    self._handle_caches(attributes)
                case _:
                    continue

    def _handle_property(self, attributes: dict[str, str]) -> None:
        name = attributes.get("name")
        value = attributes.get("value")
        if not name or value is None:
            return
        if_set = attributes.get("ifset")
        if if_set and self.get_variable(if_set) is None:
            return
        unless_set = attributes.get("unlessset")
        if unless_set and self.get_variable(unless_set) is not None:
            return
        self.set_variable(name, value, overwrite=_as_bool(attributes.get("override"), True))

    def _handle_properties(self, attributes: dict[str, str], base: Path) -> None:
        environment = attributes.get("environment")
        if environment:
            self.set_environment_prefix(environment)
        file_attr = attributes.get("file")
        if not file_attr:
            return
        properties_path = self._relative_to(base, file_attr)
        if not properties_path.exists():
            logger.debug("Unable to find property file '%s'", properties_path)
            return
        self.load_properties(
            properties_path, overwrite=_as_bool(attributes.get("override"), True)
        )

    def _handle_include(self, attributes: dict[str, str], base: Path, depth: int) -> None:
        file_attr = attributes.get("file")
        if not file_attr:
            url = attributes.get("url", "")
            if url.startswith("file:"):
                file_attr = url.removeprefix("file://").removeprefix("file:")
            else:
                logger.debug("Skipping non-file settings include '%s'", url)
                return
        included = self._relative_to(base, file_attr)
        if not included.exists():
            raise CacheRootUnavailable(f"Included settings file does not exist: {included}")
        self._parse(included, depth=depth + 1)

    def _handle_settings(self, attributes: dict[str, str]) -> None:
        branch = attributes.get("defaultBranch")
        if branch:
            self.default_branch = branch
        default_cache = attributes.get("defaultCache")
        if default_cache:
            logger.debug("'defaultCache' on <settings> is deprecated, use <caches defaultCacheDir>")
            self.default_cache_dir = self._absolute(default_cache)

    def _handle_caches(self, attributes: dict[str, str]) -> None:
        default_dir = attributes.get("defaultCacheDir")
        if default_dir:
            self.default_cache_dir = self._absolute(default_dir)
        resolution_dir = attributes.get("resolutionCacheDir")
        if resolution_dir:
            self.resolution_cache_dir = self._absolute(resolution_dir)

    # ---------------------------------------------------------------- locations

    def _relative_to(self, base: Path, value: str) -> Path:
        candidate = Path(value).expanduser()
        return candidate if candidate.is_absolute() else base / candidate

    def _absolute(self, value: str) -> Path:
        if "${" in value:
            logger.warning("Unresolved variable reference in path '%s'", value)
        return self._relative_to(self.basedir, value)

    @property
    def ivy_user_dir(self) -> Path:
        home = self.get_variable("ivy.home")
        if home:
            return self._absolute(home)
        user_home = self.get_variable("user.home") or str(Path.home())
        return Path(user_home) / ".ivy2"

    @property
    def default_cache(self) -> Path:
        if self.default_cache_dir is not None:
            return self.default_cache_dir
        cache = self.get_variable("ivy.cache.dir")
        if cache:
            return self._absolute(cache)
        return self.ivy_user_dir / "cache"

    @property
    def resolution_cache_root(self) -> Path:
        """Directory holding the ``<resolveId>-<conf>.xml`` reports."""
        if self.resolution_cache_dir is not None:
            return self.resolution_cache_dir
        return self.default_cache


__all__ = ["IvySettings"]
