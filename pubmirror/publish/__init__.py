"""Dependency-ordered publishing and downstream mirroring."""

from pubmirror.publish.errors import PublishError
from pubmirror.publish.model import PackageDetails, PackageRegistry, PublishOrder, PublishSummary
from pubmirror.publish.order import topological_sort
from pubmirror.publish.packages import load_all_packages, load_package_details
from pubmirror.publish.retry import RetryState, retry
from pubmirror.publish.sequencer import publish_all, resolve_publish_order

__all__ = [
    "PackageDetails",
    "PackageRegistry",
    "PublishError",
    "PublishOrder",
    "PublishSummary",
    "RetryState",
    "load_all_packages",
    "load_package_details",
    "publish_all",
    "resolve_publish_order",
    "retry",
    "topological_sort",
]
