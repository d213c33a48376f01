"""Error taxonomy for the Swift link pipeline.

SwiftLinkError subclasses are reported by the CLI and exit with status 1.
BuildAborted subclasses are SystemExit: they end the build immediately and are
never meant to be caught and retried.
"""

from __future__ import annotations


class SwiftLinkError(Exception):
    """Base error; carries optional raw process output and a hint."""

    def __init__(self, message: str, *, output: str | None = None, hint: str | None = None) -> None:
        super().__init__(message)
        self.output = output
        self.hint = hint

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.output:
            parts.append(f"Output:\n{self.output.rstrip()}")
        return "\n".join(parts)


class ConfigurationError(SwiftLinkError):
    """Required build environment variable or settings value is missing or invalid."""


class UnsupportedPlatform(SwiftLinkError):
    """Target OS is not macos or ios."""


class ToolNotFound(SwiftLinkError):
    """xcrun could not resolve the swift front end."""


class ToolchainQueryFailed(SwiftLinkError):
    """swift -print-target-info failed or printed something unexpected."""


class BridgeParseError(SwiftLinkError):
    """A bridge module declaration could not be parsed or uses an unsupported type."""


class BuildAborted(SystemExit):
    """Fatal condition; exits the process with status 1 and the message on stderr."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class PolicyViolation(BuildAborted):
    """Swift runtime libraries would require an rpath for the configured targets."""


class SecondaryBuildFailed(BuildAborted):
    """swift build could not be started or exited non-zero."""
