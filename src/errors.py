"""Exception taxonomy for version resolution."""

from typing import Optional


class ResolutionError(Exception):
    """Base class for all resolution failures."""


class VersionParseError(ValueError):
    """Raised for version or constraint text that cannot be parsed."""


class SourceUnavailable(ResolutionError):
    """A package source could not answer a metadata query.

    Fatal for the current run: the search cannot continue safely without the
    missing metadata, and retry policy belongs to the source itself.
    """

    def __init__(self, package, version=None, reason: Optional[str] = None):
        self.package = package
        self.version = version
        self.reason = reason
        target = f"{package}" if version is None else f"{package} {version}"
        message = f"Package source unavailable for {target}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnsatisfiableRoot(ResolutionError):
    """No assignment satisfies the root requirements.

    Carries the rendered explanation so callers can show it verbatim.
    """

    def __init__(self, explanation):
        self.explanation = explanation
        super().__init__(str(explanation))


class InternalInconsistency(ResolutionError):
    """The solver reached a state that indicates a logic defect."""


class ResolutionCancelled(ResolutionError):
    """The run was cancelled through its cancellation token."""


class ResolutionAborted(ResolutionError):
    """The run exceeded its configured decision limit."""

    def __init__(self, steps: int):
        self.steps = steps
        super().__init__(f"Resolution aborted after {steps} decisions")
