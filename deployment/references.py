from typing import Any, Callable, Iterable, List

from .errors import InvalidReference
from .models import Ref


def iter_refs(args: Iterable[Any]):
    """Yield every Ref in an argument list, including ones nested in lists."""
    for value in args:
        if isinstance(value, Ref):
            yield value
        elif isinstance(value, (list, tuple)):
            yield from iter_refs(value)


def resolve_args(args: Iterable[Any], lookup: Callable[[Ref], Any]) -> List[Any]:
    """Substitute each Ref with ``lookup(ref)``; literals pass through."""
    resolved = []
    for value in args:
        if isinstance(value, Ref):
            resolved.append(lookup(value))
        elif isinstance(value, (list, tuple)):
            resolved.append(resolve_args(value, lookup))
        else:
            resolved.append(value)
    return resolved


def check_refs(args: Iterable[Any], known, owner: str):
    """Raise InvalidReference if ``args`` names anything outside ``known``."""
    for ref in iter_refs(args):
        if ref.name not in known:
            raise InvalidReference(
                ref.name, f"'{owner}' references '{ref.name}', which is not produced by an earlier step",
            )
