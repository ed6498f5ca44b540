"""
Boolean decoders for ancestor searches and filtering.

and_ / or_ evaluate both operands against the same node; there is no
short-circuit, so a failing operand fails the whole expression even when the
other side alone would decide it.
"""

from __future__ import annotations

from .decode import Decoder, map2
from .decoders import class_list, tag_name


def has_class(name: str) -> Decoder[bool]:
    """True iff `name` is one of the node's classes."""
    return class_list.map(lambda classes: name in classes)


def is_tag(name: str) -> Decoder[bool]:
    """True iff tagName equals `name` exactly. Hosts usually report upper-case ("DIV")."""
    return tag_name.map(lambda tag: tag == name)


def and_(p: Decoder[bool], q: Decoder[bool]) -> Decoder[bool]:
    """Both hold. Both sides are evaluated."""
    return map2(lambda a, b: a and b, p, q)


def or_(p: Decoder[bool], q: Decoder[bool]) -> Decoder[bool]:
    """Either holds. Both sides are evaluated."""
    return map2(lambda a, b: a or b, p, q)


def negate(p: Decoder[bool]) -> Decoder[bool]:
    """Complement of `p`; failures pass through."""
    return p.map(lambda a: not a)
