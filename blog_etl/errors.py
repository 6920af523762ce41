"""
Pipeline error types

Every error names the key(s) that caused it (source path, year, variable,
entity) so a failing post says what broke instead of a generic message.

Usage:
    from blog_etl.errors import SourceUnavailable, JoinKeyMismatch
"""

from typing import Iterable, Optional


class PipelineError(Exception):
    """Base class for all analysis pipeline failures"""

    def __init__(self, message: str, keys: Optional[Iterable] = None):
        self.keys = list(keys) if keys is not None else []
        if self.keys:
            message = f'{message} [keys: {_format_keys(self.keys)}]'
        super().__init__(message)


class SourceUnavailable(PipelineError):
    """File missing/unreadable, or the network/API request failed"""


class MissingApiKey(SourceUnavailable):
    """No API credential in the environment for a remote fetch"""


class SchemaMismatch(PipelineError):
    """Expected column absent or table shape not what the stage needs"""


class JoinKeyMismatch(PipelineError):
    """Post-join row count diverged from what the caller expected"""


class InvalidParameter(PipelineError):
    """Unknown variable code, unsupported year, or bad option value"""


class NullToleranceExceeded(PipelineError):
    """More null rows than the caller agreed to exclude"""


def _format_keys(keys, limit=10):
    shown = ', '.join(str(k) for k in keys[:limit])
    if len(keys) > limit:
        shown += f', ... (+{len(keys) - limit} more)'
    return shown
