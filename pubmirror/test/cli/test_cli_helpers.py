from __future__ import annotations

from typing import get_args

import pytest

from pubmirror.cli.commands._helpers import publish_error_code
from pubmirror.core.errors import ErrorCode
from pubmirror.publish.errors import PublishError, PublishErrorKind


@pytest.mark.parametrize("kind", get_args(PublishErrorKind))
def test_every_kind_has_an_exit_code(kind: PublishErrorKind) -> None:
    code = publish_error_code(PublishError(kind=kind, message="x"))
    assert isinstance(code, ErrorCode)
    assert code != ErrorCode.OK


def test_config_problems_are_not_publish_errors() -> None:
    assert "config_invalid" not in get_args(PublishErrorKind)


@pytest.mark.parametrize(
    ("kind", "expected"),
    [
        ("missing_dependency", ErrorCode.USER_ERROR),
        ("tool_missing", ErrorCode.ENV_ERROR),
        ("not_available", ErrorCode.NETWORK_ERROR),
        ("git_failed", ErrorCode.IO_ERROR),
    ],
)
def test_exit_code_mapping(kind: PublishErrorKind, expected: ErrorCode) -> None:
    assert publish_error_code(PublishError(kind=kind, message="x")) == expected
