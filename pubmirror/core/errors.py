"""Process exit codes.

The numeric values are part of the CLI contract and must stay stable:

- 0: every package published and mirrored
- 1: user error (bad config, invalid manifest, missing internal dependency)
- 2: environment error (a required tool is not installed)
- 4: network error (registry publish, availability polling, download)
- 5: I/O error (extraction, copy, downstream git operations)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
