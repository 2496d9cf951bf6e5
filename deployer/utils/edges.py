from dataclasses import dataclass
from typing import Any, Callable, Optional

from web3 import Web3


def describe(value):
    if hasattr(value, "describe"):
        return value.describe()
    if hasattr(value, "address"):
        return value.address
    return str(value)


def address_of(value):
    return value.address if hasattr(value, "address") else value


def same_value(current, desired):
    """
    On-chain equality: addresses compare case-insensitively, everything else
    with `==`.
    """
    current = address_of(current)
    desired = address_of(desired)
    if isinstance(current, str) and isinstance(desired, str):
        if Web3.is_address(current) and Web3.is_address(desired):
            return current.lower() == desired.lower()
    return current == desired


@dataclass(frozen=True)
class PermissionEdge:
    """
    One fact that must hold on-chain: `subject` sees `object` through
    `predicate` with value `desired`.

    `read` returns the current value, `write` takes the desired value and
    returns the transaction closing the gap. `desired` may be a zero argument
    callable, resolved right before the edge is evaluated. A `deferred` write
    only signals a timelocked change, so the fact isn't expected to hold once
    it confirms.
    """

    subject: Any
    predicate: str
    object: Any
    desired: Any
    read: Callable[[], Any]
    write: Callable[[Any], Any]
    label: Optional[str] = None
    deferred: bool = False

    def resolve_desired(self):
        return self.desired() if callable(self.desired) else self.desired

    def describe(self):
        if self.label:
            return self.label
        target = "" if self.object is None else describe(self.object)
        return f"{describe(self.subject)}.{self.predicate}({target})"


def role_edge(subject, predicate, setter, obj, desired=True, label=None, deferred=False):
    """
    `subject.<predicate>(obj)` must equal `desired`, fixed with
    `subject.<setter>(obj, desired)`. Covers handler, keeper, liquidator and
    partner grants.
    """
    return PermissionEdge(
        subject=subject,
        predicate=predicate,
        object=obj,
        desired=desired,
        read=lambda: getattr(subject, predicate)(address_of(obj)),
        write=lambda value: getattr(subject, setter)(address_of(obj), value),
        label=label or f"{describe(subject)}.{setter}({describe(obj)}, {desired})",
        deferred=deferred,
    )


def setting_edge(subject, getter, setter, desired, label=None, deferred=False):
    """
    `subject.<getter>()` must equal `desired`, fixed with
    `subject.<setter>(desired)`. Covers address wiring, flags, fees and gov.
    """
    return PermissionEdge(
        subject=subject,
        predicate=getter,
        object=None,
        desired=desired,
        read=lambda: getattr(subject, getter)(),
        write=lambda value: getattr(subject, setter)(address_of(value)),
        label=label or (
            f"{describe(subject)}.{setter}" if callable(desired)
            else f"{describe(subject)}.{setter}({describe(desired)})"
        ),
        deferred=deferred,
    )


def membership_edge(subject, predicate, adder, obj, label=None):
    """
    `obj` must be a member of `subject.<predicate>`, added with
    `subject.<adder>(obj)` (plugins style registries without a value argument).
    """
    return PermissionEdge(
        subject=subject,
        predicate=predicate,
        object=obj,
        desired=True,
        read=lambda: bool(getattr(subject, predicate)(address_of(obj))),
        write=lambda value: getattr(subject, adder)(address_of(obj)),
        label=label or f"{describe(subject)}.{adder}({describe(obj)})",
    )


def delegated_edge(subject, predicate, governor, setter, obj, desired=True, label=None, deferred=False):
    """
    `subject.<predicate>(obj)` must equal `desired`, but only `governor` may
    change it: `governor.<setter>(subject, obj, desired)`.
    """
    return PermissionEdge(
        subject=subject,
        predicate=predicate,
        object=obj,
        desired=desired,
        read=lambda: getattr(subject, predicate)(address_of(obj)),
        write=lambda value: getattr(governor, setter)(address_of(subject), address_of(obj), value),
        label=label or f"{describe(governor)}.{setter}({describe(subject)}, {describe(obj)}, {desired})",
        deferred=deferred,
    )
