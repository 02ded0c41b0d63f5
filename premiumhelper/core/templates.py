"""Template state, asset registration and rendering for host pages."""

from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PrefixLoader,
    select_autoescape,
)


class AssetPriority(IntEnum):
    """Load order buckets for registered assets (lower loads first)."""

    CORE = 0
    PRIMARY = 10
    NORMAL = 15
    LATE = 20
    LAST = 30


@dataclass
class Asset:
    """A stylesheet or script registered for a page."""

    id: str
    url: str
    kind: str  # "style" or "script"
    contexts: tuple[str, ...] = ("frontend",)
    priority: AssetPriority = AssetPriority.NORMAL


class AssetRegistry:
    """Collects stylesheets and scripts for one page render.

    Registration is idempotent by id: registering the same id again
    replaces the earlier entry instead of adding a second one.
    """

    def __init__(self):
        self._assets: dict[str, Asset] = {}

    def add_stylesheet(
        self,
        asset_id: str,
        url: str,
        contexts: str | list[str] = "frontend",
        priority: AssetPriority = AssetPriority.NORMAL,
    ) -> None:
        """Register a stylesheet."""
        self._add(asset_id, url, "style", contexts, priority)

    def add_script(
        self,
        asset_id: str,
        url: str,
        contexts: str | list[str] = "frontend",
        priority: AssetPriority = AssetPriority.NORMAL,
    ) -> None:
        """Register a script."""
        self._add(asset_id, url, "script", contexts, priority)

    def _add(
        self,
        asset_id: str,
        url: str,
        kind: str,
        contexts: str | list[str],
        priority: AssetPriority,
    ) -> None:
        if isinstance(contexts, str):
            contexts = [contexts]
        self._assets[asset_id] = Asset(
            id=asset_id,
            url=url,
            kind=kind,
            contexts=tuple(contexts),
            priority=AssetPriority(priority),
        )

    def get(self, asset_id: str) -> Asset | None:
        """Look up a registered asset by id."""
        return self._assets.get(asset_id)

    def stylesheets(self, context: str) -> list[Asset]:
        """Stylesheets for a context, in load order."""
        return self._select("style", context)

    def scripts(self, context: str) -> list[Asset]:
        """Scripts for a context, in load order."""
        return self._select("script", context)

    def _select(self, kind: str, context: str) -> list[Asset]:
        # sorted() is stable, so equal priorities keep registration order
        matching = [a for a in self._assets.values() if a.kind == kind and context in a.contexts]
        return sorted(matching, key=lambda a: a.priority)

    def __len__(self) -> int:
        return len(self._assets)


@dataclass
class TemplateState:
    """Mutable template state for one page render.

    ``state`` is the data handed to the client-side page component, e.g.
    the wizard ``steps``.
    """

    template: str
    state: dict[str, Any] = field(default_factory=dict)
    assets: AssetRegistry = field(default_factory=AssetRegistry)

    def get_state(self, key: str, default: Any = None) -> Any:
        """Read one state entry."""
        return self.state.get(key, default)

    def set_state(self, values: dict[str, Any]) -> None:
        """Merge entries into the state."""
        self.state.update(values)


class OutputBuffer:
    """Accumulates markup fragments contributed by hooks."""

    def __init__(self):
        self._parts: list[str] = []

    def append(self, fragment: str) -> None:
        self._parts.append(fragment)

    def getvalue(self) -> str:
        return "".join(self._parts)

    def __bool__(self) -> bool:
        return any(self._parts)


class TemplateRenderer:
    """Jinja2 renderer for host templates and plugin template resources.

    Plugin templates are addressed as ``"<plugin>/<template>"``.
    """

    def __init__(self, templates_dir: Path):
        """Initialize renderer.

        Args:
            templates_dir: Directory holding the host's own templates.
        """
        self.templates_dir = templates_dir
        self._plugin_loaders: dict[str, FileSystemLoader] = {}
        self._env: Environment | None = None

    def add_plugin_templates(self, plugin_name: str, directory: Path) -> None:
        """Expose a plugin's templates under its name prefix."""
        self._plugin_loaders[plugin_name] = FileSystemLoader(str(directory))
        self._env = None

    def remove_plugin_templates(self, plugin_name: str) -> None:
        """Stop serving a plugin's templates."""
        if self._plugin_loaders.pop(plugin_name, None) is not None:
            self._env = None

    def get_env(self) -> Environment:
        """Get or create the Jinja2 environment."""
        if self._env is not None:
            return self._env

        self._env = Environment(
            loader=ChoiceLoader(
                [
                    PrefixLoader(dict(self._plugin_loaders)),
                    FileSystemLoader(str(self.templates_dir)),
                ]
            ),
            autoescape=select_autoescape(["html", "htm", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        return self._env

    def fetch(self, template_name: str, **context: Any) -> str:
        """Render a template to a string.

        Raises:
            jinja2.TemplateNotFound: If no loader knows the template.
        """
        return self.get_env().get_template(template_name).render(**context)
