"""Exception types raised by the configurator and the bundle transform."""


class GolfConfiguratorError(Exception):
    """Base class for all configurator errors."""

    pass


class SelectionRuleViolation(GolfConfiguratorError):
    """Raised when a candidate selection breaks a selection rule."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ConfigurationIncomplete(GolfConfiguratorError):
    """Raised when checkout is attempted with an incomplete section."""

    def __init__(self, section: str, reason: str) -> None:
        super().__init__(f"{section}: {reason}")
        self.section = section
        self.reason = reason


class BundleTransformError(GolfConfiguratorError):
    """Base class for errors that abort the consolidation transform."""

    pass


class MissingBundleMetadata(BundleTransformError):
    """Raised when a bundle line lacks required metadata properties."""

    def __init__(self, line_id: str, missing: list[str]) -> None:
        super().__init__(
            f"Missing required bundle metadata: {', '.join(missing)}. "
            f"Line ID: {line_id}. "
            "All bundle lines must carry complete metadata."
        )
        self.line_id = line_id
        self.missing = missing


class InconsistentBundleError(BundleTransformError):
    """Raised when lines of one bundle disagree on a group-wide value."""

    def __init__(self, bundle_id: str, reason: str) -> None:
        super().__init__(f"Bundle {bundle_id}: {reason}")
        self.bundle_id = bundle_id
        self.reason = reason


class SubmissionFailure(GolfConfiguratorError):
    """Raised when the commerce platform rejects a cart submission."""

    pass


class InvalidBundleMetadata(BundleTransformError):
    """Raised when a bundle line property is present but malformed."""

    def __init__(self, line_id: str, reason: str) -> None:
        super().__init__(f"Invalid bundle metadata on line {line_id}: {reason}")
        self.line_id = line_id
        self.reason = reason
