"""
errors.py - Exception hierarchy for chainscore

Structural problems found while decoding repository files are raised as
InternalError subclasses. They abort the enclosing check and are turned into
runtime-error results by the check drivers. Pinning and permission findings
are never exceptions.
"""


class ChainscoreError(Exception):
    """Base exception for all chainscore errors"""


class InternalError(ChainscoreError):
    """Raised when a decoded document does not have the expected shape"""


class InvalidWorkflowError(InternalError):
    """Raised when a GitHub workflow cannot be decoded or has wrong field types"""


class InvalidDockerfileError(InternalError):
    """Raised when a Dockerfile instruction does not match its expected grammar"""


class RepoClientError(ChainscoreError):
    """Raised when repository files cannot be listed or read"""
