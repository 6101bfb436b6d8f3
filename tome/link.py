"""Internal-link resolution, decoupled from storage so rendering can be tested."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


class LinkKind(enum.Enum):
    """How an internal link target resolved."""

    AVAILABLE = "available"
    MISSING = "missing"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class LinkStatus:
    """Resolution result for an internal link.

    ``target`` is set only for redirects and names the title redirected to.
    """

    kind: LinkKind
    target: Optional[str] = None

    @classmethod
    def available(cls) -> "LinkStatus":
        """The target article exists locally; render as a live link."""
        return cls(LinkKind.AVAILABLE)

    @classmethod
    def missing(cls) -> "LinkStatus":
        """The target is unknown locally; render with a missing marker."""
        return cls(LinkKind.MISSING)

    @classmethod
    def redirect(cls, target: str) -> "LinkStatus":
        """The target is a redirect to another title."""
        return cls(LinkKind.REDIRECT, target)


class LinkResolver(ABC):
    """Decides the status of internal link targets."""

    @abstractmethod
    def resolve_internal(self, target: str) -> LinkStatus:
        """Return the status of the internal link ``target``."""


class NoopLinkResolver(LinkResolver):
    """Treats every link as missing."""

    def resolve_internal(self, target: str) -> LinkStatus:
        return LinkStatus.missing()


class AllAvailableResolver(LinkResolver):
    """Treats every link as available."""

    def resolve_internal(self, target: str) -> LinkStatus:
        return LinkStatus.available()