"""Exception hierarchy for gutenberg-ci-sync.

Exception Hierarchy:
    CISyncError (base)
    ├── ConfigurationError
    │   └── CredentialNotFoundError
    ├── UpstreamQueryError
    ├── MirrorLookupError
    └── DispatchError

Only ConfigurationError and UpstreamQueryError abort a reconciliation pass.
MirrorLookupError is converted to a "trigger owed" result by the mirror state
resolver, and DispatchError is logged per pull request.

Example Usage:
    >>> from gutenberg_ci_sync.exceptions import UpstreamQueryError
    >>> try:
    ...     prs = await source.fetch_open_pull_requests()
    ... except UpstreamQueryError as e:
    ...     log.error("upstream_query_failed", error=e.message)
"""


class CISyncError(Exception):
    """Base exception for all gutenberg-ci-sync errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(CISyncError):
    """Configuration-related errors.

    Raised before any network call is made when settings are invalid or a
    required credential is missing.
    """

    pass


class CredentialNotFoundError(ConfigurationError):
    """A required credential environment variable is unset or blank.

    Attributes:
        variable: Name of the environment variable that was looked up
        suggestion: Hint shown to the operator
    """

    def __init__(self, variable: str, suggestion: str | None = None) -> None:
        self.variable = variable
        self.suggestion = suggestion

        message = f"{variable} env variable is required"
        full_message = message
        if suggestion:
            full_message = f"{message}\nSuggestion: {suggestion}"

        super().__init__(full_message)
        # Keep the short form for one-line CLI output
        self.message = message


class UpstreamQueryError(CISyncError):
    """The upstream pull request query failed or returned unusable data.

    Attributes:
        repository: "owner/name" of the queried repository
    """

    def __init__(self, message: str, repository: str | None = None) -> None:
        self.repository = repository
        if repository:
            message = f"{message} (repository: {repository})"
        super().__init__(message)


class MirrorLookupError(CISyncError):
    """Reading the mirror state failed for a reason other than "not found".

    Attributes:
        branch_name: Mirror branch whose state was requested
        status_code: HTTP status, when a response was received
    """

    def __init__(self, message: str, branch_name: str, status_code: int | None = None) -> None:
        self.branch_name = branch_name
        self.status_code = status_code
        super().__init__(f"{message} (branch: {branch_name})")


class DispatchError(CISyncError):
    """Triggering the CI workflow for a pull request failed.

    Attributes:
        pr_number: Upstream pull request number
        branch_name: Mirror branch name sent to the workflow
        status_code: HTTP status, when a response was received
    """

    def __init__(
        self,
        message: str,
        pr_number: int | None = None,
        branch_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.pr_number = pr_number
        self.branch_name = branch_name
        self.status_code = status_code

        context = []
        if pr_number is not None:
            context.append(f"pr: #{pr_number}")
        if branch_name:
            context.append(f"branch: {branch_name}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)
