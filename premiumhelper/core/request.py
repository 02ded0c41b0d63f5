"""Per-request context shared by the hooks of a single page render."""

from dataclasses import dataclass, field
from typing import Any

from .models import Venue, Visitor


@dataclass
class RequestContext:
    """Everything a hook may know about the request being rendered.

    A fresh context is built for every request and handed to every event
    fired while serving it. Plugins keep request-scoped values in
    ``attributes`` instead of on themselves.
    """

    requested_page: str
    base_url: str = ""
    venue: Venue | None = None
    visitor: Visitor | None = None
    attributes: dict[str, Any] = field(default_factory=dict)

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    def get_attribute(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)
