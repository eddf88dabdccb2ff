"""Custom exceptions for tfe_push.

Every failure the push pipeline can surface derives from ``PushError`` and
carries a one-line, user-facing description.
"""


class PushError(Exception):
    """Base class for all pipeline failures."""


class MissingExternalToolError(PushError):
    """Raised when a required binary (tar, gzip, git) is not on PATH."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"required tool '{tool}' was not found on PATH")


class NoVcsDetectedError(PushError):
    """Raised when tracked-only selection is requested outside a git work tree."""

    def __init__(self, root: str):
        self.root = root
        super().__init__(
            f"{root} is not inside a git work tree; "
            "use --no-vcs to upload every file instead"
        )


class ArchiveBuildError(PushError):
    """Raised when any step of building the configuration archive fails."""


class ApiRequestError(PushError):
    """Raised on a transport or authorization failure talking to the API."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class MalformedResponseError(ApiRequestError):
    """Raised when an API response does not have the expected shape."""


class UploadError(PushError):
    """Raised when transferring the archive to the upload URL fails."""


class RunResolutionTimeoutError(PushError):
    """Raised when no run appears for a configuration version in time."""

    def __init__(self, configuration_version_id: str, attempts: int):
        self.configuration_version_id = configuration_version_id
        self.attempts = attempts
        super().__init__(
            f"no run found for configuration version "
            f"{configuration_version_id} after {attempts} attempts"
        )


class PollingError(PushError):
    """Raised when a single status poll fails. Polling is not retried."""


class CredentialsError(PushError):
    """Raised when no API token can be found for the target host.

    The message explains both places a token is looked up.
    """

    def __init__(self, hostname: str):
        self.hostname = hostname
        super().__init__(
            f"no API token for {hostname}: set TFE_TOKEN or run "
            f"'terraform login {hostname}'"
        )
