"""Plugin discovery, loading and the API handed to plugins.

A plugin is a directory under ``plugins/`` holding a ``plugin.json``
manifest and a Python entrypoint. The entrypoint may define
``on_load(api)`` and ``on_unload()``; everything a plugin touches in the
host goes through the ``PluginAPI`` it receives, limited to the
permissions its manifest declares.
"""

import importlib.util
import json
from pathlib import Path
from types import ModuleType
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .directory import Directory
from .hooks import HookManager, hook_manager
from .logging import get_logger, plugins_logger as logger
from .models import RoleAssignment, Subscription
from .templates import TemplateRenderer


class PluginManifest(BaseModel):
    """A plugin's ``plugin.json`` plus what the host knows about it."""

    model_config = ConfigDict(extra="ignore")

    name: str
    version: str = "1.0.0"
    display_name: str = ""
    description: str = ""
    author: str = ""
    entrypoint: str = "plugin.py"
    permissions: list[str] = Field(default_factory=list)

    # Filled in by the manager
    directory: str = ""
    enabled: bool = False


class PluginError(Exception):
    """Plugin loading or execution error."""

    pass


class PluginManager:
    """Finds plugins, loads the enabled ones and unloads them again.

    Disabled plugins are still discovered (so they can be listed) but are
    never imported, so they never register hooks.
    """

    VALID_PERMISSIONS = {
        "hook:template_display",
        "hook:wizard_section",
        "api:read_roles",
        "api:read_subscriptions",
    }

    def __init__(
        self,
        plugins_dir: Path,
        disabled_plugins: list[str] | None = None,
        hook_mgr: HookManager | None = None,
        directory: Directory | None = None,
        renderer: TemplateRenderer | None = None,
    ):
        """Initialize plugin manager.

        Args:
            plugins_dir: Directory holding one sub-directory per plugin.
            disabled_plugins: Names of plugins that must not be loaded.
            hook_mgr: Hook manager plugins register with (global if None).
            directory: Directory the plugins may read through their API.
            renderer: Renderer that serves plugin template resources.
        """
        self.plugins_dir = plugins_dir
        self.disabled_plugins = set(disabled_plugins or [])
        self.hooks = hook_mgr or hook_manager
        self.directory = directory
        self.renderer = renderer
        self._loaded: dict[str, tuple[PluginManifest, ModuleType]] = {}

    def discover_plugins(self) -> list[PluginManifest]:
        """Manifests of every plugin directory, sorted by directory name."""
        if not self.plugins_dir.exists():
            return []

        manifests = []
        for plugin_dir in sorted(self.plugins_dir.iterdir()):
            if not plugin_dir.is_dir() or plugin_dir.name.startswith("."):
                continue
            manifest = self.read_manifest(plugin_dir)
            if manifest is not None:
                manifest.enabled = plugin_dir.name not in self.disabled_plugins
                manifests.append(manifest)
        return manifests

    def read_manifest(self, plugin_dir: Path) -> PluginManifest | None:
        """Parse ``plugin.json``, keeping only permissions the host grants.

        Returns:
            The manifest, or None if it is missing or malformed.
        """
        try:
            raw = json.loads((plugin_dir / "plugin.json").read_text(encoding="utf-8"))
            manifest = PluginManifest.model_validate(raw)
        except FileNotFoundError:
            return None
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"Ignoring plugin '{plugin_dir.name}': bad manifest ({e})")
            return None

        rejected = [p for p in manifest.permissions if p not in self.VALID_PERMISSIONS]
        if rejected:
            logger.warning(f"Plugin '{plugin_dir.name}' requested invalid permissions: {rejected}")
        manifest.permissions = [p for p in manifest.permissions if p in self.VALID_PERMISSIONS]
        manifest.directory = plugin_dir.name
        return manifest

    def load_plugin(self, plugin_name: str) -> bool:
        """Import a plugin and call its ``on_load``.

        Anything the plugin attached before a failure is detached again.

        Returns:
            True once the plugin is loaded.

        Raises:
            PluginError: If the plugin cannot be imported or initialized.
        """
        plugin_dir = self.plugins_dir / plugin_name
        manifest = self.read_manifest(plugin_dir)
        if manifest is None:
            raise PluginError(f"Invalid plugin: {plugin_name}")

        try:
            module = self._import_entrypoint(plugin_dir, manifest)

            templates_dir = plugin_dir / "templates"
            if self.renderer is not None and templates_dir.is_dir():
                self.renderer.add_plugin_templates(plugin_name, templates_dir)

            on_load = getattr(module, "on_load", None)
            if on_load is not None:
                on_load(
                    PluginAPI(
                        plugin_name=plugin_name,
                        permissions=set(manifest.permissions),
                        hooks=self.hooks,
                        directory=self.directory,
                    )
                )
        except Exception as e:
            self._detach(plugin_name)
            if isinstance(e, PluginError):
                raise
            raise PluginError(f"Error loading plugin {plugin_name}: {e}")

        self._loaded[plugin_name] = (manifest, module)
        logger.info(f"Loaded plugin '{plugin_name}' ({manifest.version})")
        return True

    def unload_plugin(self, plugin_name: str) -> bool:
        """Call the plugin's ``on_unload`` and detach its hooks.

        Returns:
            False if the plugin was not loaded.
        """
        entry = self._loaded.pop(plugin_name, None)
        if entry is None:
            return False

        on_unload = getattr(entry[1], "on_unload", None)
        if on_unload is not None:
            try:
                on_unload()
            except Exception as e:
                logger.warning(f"Error during unload of plugin '{plugin_name}': {e}")

        self._detach(plugin_name)
        logger.info(f"Unloaded plugin '{plugin_name}'")
        return True

    def load_enabled_plugins(self) -> int:
        """Load every enabled plugin; failures are logged and skipped.

        Returns:
            Number of plugins loaded.
        """
        loaded = 0
        for manifest in self.discover_plugins():
            if not manifest.enabled:
                continue
            try:
                self.load_plugin(manifest.directory)
                loaded += 1
            except PluginError as e:
                logger.error(f"Failed to load plugin '{manifest.directory}': {e}")
        return loaded

    def enable_plugin(self, plugin_name: str) -> bool:
        self.disabled_plugins.discard(plugin_name)
        return self.load_plugin(plugin_name)

    def disable_plugin(self, plugin_name: str) -> bool:
        self.disabled_plugins.add(plugin_name)
        return self.unload_plugin(plugin_name)

    def get_module(self, plugin_name: str) -> Any:
        """The loaded entrypoint module of a plugin, or None."""
        entry = self._loaded.get(plugin_name)
        return entry[1] if entry else None

    def is_loaded(self, plugin_name: str) -> bool:
        return plugin_name in self._loaded

    def _import_entrypoint(self, plugin_dir: Path, manifest: PluginManifest) -> ModuleType:
        entrypoint = plugin_dir / manifest.entrypoint
        if not entrypoint.is_file():
            raise PluginError(f"Plugin entrypoint not found: {manifest.entrypoint}")

        module_spec = importlib.util.spec_from_file_location(
            f"premiumhelper_plugin_{plugin_dir.name}", entrypoint
        )
        if module_spec is None or module_spec.loader is None:
            raise PluginError(f"Cannot load plugin module: {plugin_dir.name}")

        module = importlib.util.module_from_spec(module_spec)
        module_spec.loader.exec_module(module)
        return module

    def _detach(self, plugin_name: str) -> None:
        self.hooks.unregister_plugin(plugin_name)
        if self.renderer is not None:
            self.renderer.remove_plugin_templates(plugin_name)


class PluginAPI:
    """Limited API exposed to plugins.

    Provides controlled access to host functionality based on
    declared permissions.
    """

    def __init__(
        self,
        plugin_name: str,
        permissions: set[str],
        hooks: HookManager,
        directory: Directory | None = None,
    ):
        """Initialize plugin API.

        Args:
            plugin_name: Name of the plugin.
            permissions: Set of granted permissions.
            hooks: HookManager instance.
            directory: Host directory for role/subscription lookups.
        """
        self.plugin_name = plugin_name
        self.permissions = permissions
        self.logger = get_logger(f"plugins.{plugin_name}")
        self._hooks = hooks
        self._directory = directory

    @property
    def plugin_path(self) -> str:
        """URL path under which the plugin's static files are served."""
        return f"plugins/{self.plugin_name}"

    def template_resource(self, template: str) -> str:
        """Name a plugin template for the host's renderer."""
        return f"{self.plugin_name}/{template}"

    def register_hook(
        self,
        event: str,
        callback: Callable,
        priority: int = 50,
    ) -> bool:
        """Register a hook callback.

        Raises:
            PermissionError: If plugin lacks permission for this hook.
        """
        self._require(f"hook:{event}")

        self._hooks.register(
            event=event,
            callback=callback,
            priority=priority,
            plugin=self.plugin_name,
        )
        return True

    def get_user_roles(self, venue_id: int, user_id: int) -> list[RoleAssignment]:
        """Roles the user holds in a venue."""
        self._require("api:read_roles")
        return self._get_directory().get_roles(venue_id, user_id)

    def get_individual_subscription(self, user_id: int, venue_id: int) -> Subscription | None:
        """The user's individual subscription for a venue."""
        self._require("api:read_subscriptions")
        return self._get_directory().get_individual_subscription(user_id, venue_id)

    def get_institutional_subscriptions(self, user_id: int, venue_id: int) -> list[Subscription]:
        """Institutional subscriptions linked to the user for a venue."""
        self._require("api:read_subscriptions")
        return self._get_directory().get_institutional_subscriptions(user_id, venue_id)

    def _require(self, permission: str) -> None:
        if permission not in self.permissions:
            logger.warning(
                f"Plugin '{self.plugin_name}' used '{permission}' without declaring it"
            )
            raise PermissionError(
                f"Plugin '{self.plugin_name}' lacks permission: {permission}"
            )

    def _get_directory(self) -> Directory:
        if self._directory is None:
            raise PluginError("No directory is attached to this host")
        return self._directory
