class OpmonError(Exception):
    """Base exception for opmon."""

    pass


class SetupError(OpmonError):
    """Base exception for fatal setup failures. The workflow aborts when raised."""

    pass


class PreconditionError(SetupError):
    """Raised when the cluster session is missing, unauthenticated or under-privileged."""

    pass


class TokenMintError(SetupError):
    """Raised when the cluster returns an empty service account token."""

    pass


class ClusterError(SetupError):
    """Raised when an unexpected control-plane error prevents a provisioning step."""

    pass
