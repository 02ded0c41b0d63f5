"""Event hook system for plugin integration."""

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from .logging import hooks_logger as logger


@dataclass
class Hook:
    """Registered hook callback."""

    name: str
    callback: Callable[[Any], bool | None]
    priority: int = 50  # Lower = runs earlier
    plugin: str | None = None


class HookHandler(Protocol):
    """A component that can attach itself to the host's hook dispatch.

    The host hands over a plugin API during ``register`` and calls
    ``unregister`` when the component is disabled.
    """

    name: str

    def register(self, api: Any) -> bool: ...

    def unregister(self) -> None: ...


class HookManager:
    """Event-based hook system for extensibility.

    Callbacks receive the event payload, may mutate it in place and return
    a boolean. Returning ``True`` claims the event: later callbacks are
    skipped and the host suppresses its default processing. ``False`` or
    ``None`` means "continue".

    Events:
    - template_display: Before a page template is rendered. Payload holds
      the request context and the mutable template state.
    - wizard_section: Before a submission wizard section is rendered.
      Payload holds the request context, section id, template renderer
      and output buffer.
    """

    KNOWN_EVENTS = {
        "template_display",
        "wizard_section",
        "plugin_enable",
        "plugin_disable",
    }

    def __init__(self):
        """Initialize hook manager."""
        self._hooks: dict[str, list[Hook]] = defaultdict(list)
        self._sorted: dict[str, bool] = {}

    def register(
        self,
        event: str,
        callback: Callable[[Any], bool | None],
        priority: int = 50,
        plugin: str | None = None,
    ) -> None:
        """Register a hook callback for an event.

        Args:
            event: Event name to listen for.
            callback: Function to call with the payload.
            priority: Execution order (lower = earlier). Default 50.
            plugin: Plugin name that registered this hook.
        """
        if event not in self.KNOWN_EVENTS:
            logger.debug(f"Registering hook for unknown event '{event}'")

        hook = Hook(
            name=event,
            callback=callback,
            priority=priority,
            plugin=plugin,
        )
        self._hooks[event].append(hook)
        self._sorted[event] = False

    def unregister(self, event: str, callback: Callable) -> bool:
        """Unregister a hook callback.

        Args:
            event: Event name.
            callback: Callback to remove.

        Returns:
            True if callback was found and removed.
        """
        initial_count = len(self._hooks[event])
        self._hooks[event] = [h for h in self._hooks[event] if h.callback != callback]
        return len(self._hooks[event]) < initial_count

    def unregister_plugin(self, plugin: str) -> int:
        """Unregister all hooks from a plugin.

        Args:
            plugin: Plugin name.

        Returns:
            Number of hooks removed.
        """
        removed = 0
        for event in self._hooks:
            initial = len(self._hooks[event])
            self._hooks[event] = [h for h in self._hooks[event] if h.plugin != plugin]
            removed += initial - len(self._hooks[event])
        return removed

    def emit(self, event: str, payload: Any = None) -> bool:
        """Dispatch an event to its hooks in priority order.

        Args:
            event: Event name.
            payload: Data handed to every hook.

        Returns:
            True if a hook claimed the event, False otherwise.
        """
        if not self._hooks.get(event):
            return False

        if not self._sorted.get(event, False):
            self._hooks[event].sort(key=lambda h: h.priority)
            self._sorted[event] = True

        for hook in list(self._hooks[event]):
            try:
                if hook.callback(payload) is True:
                    return True
            except Exception as e:
                # Log but don't break the chain
                logger.error(f"Hook error in {hook.plugin or 'unknown'}:{event}: {e}")

        return False

    def has_hooks(self, event: str) -> bool:
        """Check if event has any registered hooks."""
        return bool(self._hooks.get(event))

    def get_hooks(self, event: str) -> list[Hook]:
        """Get all hooks for an event."""
        return list(self._hooks.get(event, []))


# Global hook manager instance
hook_manager = HookManager()
