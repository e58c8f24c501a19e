"""Dependency-respecting publish order.

A depth-first post-order walk: a package is emitted only after every internal
dependency it names has been emitted. The walk uses an explicit stack, so deep
dependency chains do not run into the interpreter's recursion limit.
"""

from __future__ import annotations

from dataclasses import dataclass

from pubmirror.core.result import Err, Ok, Result
from pubmirror.publish.errors import PublishError
from pubmirror.publish.model import PackageDetails, PackageRegistry, PublishOrder


@dataclass(slots=True)
class _Frame:
    package: PackageDetails
    chain: tuple[str, ...]
    next_dep: int = 0


def topological_sort(packages: PackageRegistry) -> Result[PublishOrder, PublishError]:
    """Order ``packages`` so each one follows all of its ``local_deps``.

    Roots are visited in registry iteration order. A name is marked visited
    when first entered, so a dependency cycle terminates instead of looping;
    the members of a cycle then come out in walk order.

    Returns:
        Err(missing_dependency) naming the absent package and the chain of
        names that referenced it.
    """
    ordered: list[PackageDetails] = []
    visited: set[str] = set()

    for root in packages:
        if root in visited:
            continue
        visited.add(root)
        stack = [_Frame(packages[root], (root,))]

        while stack:
            frame = stack[-1]
            deps = frame.package.local_deps
            if frame.next_dep >= len(deps):
                ordered.append(frame.package)
                stack.pop()
                continue

            dep = deps[frame.next_dep]
            frame.next_dep += 1
            if dep in visited:
                continue
            visited.add(dep)

            chain = (*frame.chain, dep)
            details = packages.get(dep)
            if details is None:
                return Err(
                    PublishError(
                        kind="missing_dependency",
                        message=f"Could not find package {dep}. path: {' -> '.join(chain)}",
                        hint=f"{frame.package.name} depends on {dep}, which is not a public "
                        "package in this repository",
                    )
                )
            stack.append(_Frame(details, chain))

    return Ok(tuple(ordered))
