"""
Exception hierarchy for directory link operations.

All link failures derive from LinkError so callers can catch broadly or
specifically.  None of them are retried by the link layer itself.
"""

from __future__ import annotations


class LinkError(Exception):
    """Base class for all link exceptions."""


class InvalidArgumentError(LinkError):
    """Raised when a link or target path is blank."""


class TargetNotFoundError(LinkError):
    """Raised when the directory a link should point at does not exist."""

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(f"Target directory does not exist: {target}")


class AlreadyExistsError(LinkError):
    """Raised when something already occupies the link path and overwrite is off."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"The link point already exists: {path}")


class PlatformUnsupportedError(LinkError):
    """Raised when no link provider exists for the running platform."""

    def __init__(self, platform: str) -> None:
        self.platform = platform
        super().__init__(f"Directory links are not supported on this platform: {platform}")


class SpawnFailureError(LinkError):
    """
    Raised when the platform link tool could not be started at all.

    Attributes
    ----------
    tool : Executable that failed to launch.
    hint : What the user can do about it.
    """

    def __init__(self, tool: str, hint: str) -> None:
        self.tool = tool
        self.hint = hint
        super().__init__(f"Unable to execute {tool}. {hint}")


class ProviderFailureError(LinkError):
    """
    Raised when the link tool ran but failed, or a link entry could not be removed.

    Attributes
    ----------
    exit_code : Tool exit status, or None when no tool was involved.
    detail    : Captured tool output (or OS error text), verbatim.
    """

    def __init__(self, message: str, detail: str = "", exit_code: int | None = None) -> None:
        self.detail = detail
        self.exit_code = exit_code
        text = f"{message}: {detail}" if detail else message
        super().__init__(text)
