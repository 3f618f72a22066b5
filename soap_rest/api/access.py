"""Per-operation access rights."""
from enum import IntFlag
from typing import Dict, Iterable, List, Mapping, Optional

from soap_rest.errors import ConfigurationError


class Verb(IntFlag):
    """HTTP verbs as bit flags."""

    NONE = 0
    GET = 1
    POST = 2
    PUT = 4
    PATCH = 8
    DELETE = 16


FULL_ACCESS = Verb.GET | Verb.POST | Verb.PUT | Verb.PATCH | Verb.DELETE


def list_to_mask(verbs: Iterable[str]) -> Verb:
    """Convert verb names ("GET", "post", ...) to a mask."""
    mask = Verb.NONE
    for verb in verbs:
        try:
            mask |= Verb[str(verb).strip().upper()]
        except KeyError:
            raise ConfigurationError(f"Unknown verb in access rules: {verb}")
    return mask


def mask_to_list(mask: int) -> List[str]:
    """Convert a mask to its verb names, in declaration order."""
    return [verb.name for verb in Verb if verb and mask & verb]


class AccessPolicy:
    """
    Maps operation names to verb masks.

    Rules are keyed by operation name (any case) with ``*`` as the fallback.
    A policy with no rules grants full access.
    """

    def __init__(self, rules: Optional[Mapping[str, Iterable[str]]] = None):
        self.rules: Dict[str, Verb] = {
            name.lower(): list_to_mask(verbs) for name, verbs in (rules or {}).items()
        }

    def permissions_of(self, name: str) -> Verb:
        if not self.rules:
            return FULL_ACCESS

        mask = self.rules.get(name.lower())
        if mask is None:
            mask = self.rules.get("*", Verb.NONE)
        return mask
