# Overview: Lookups over the capability registry.

from collections import namedtuple

from .definitions import PERMISSION_DEFINITIONS


Capability = namedtuple("Capability", "tag name description category")

CAPABILITIES = tuple(Capability(*row) for row in PERMISSION_DEFINITIONS)

_BY_TAG = {capability.tag: capability for capability in CAPABILITIES}


def capability_tags():
    """Every tag, in registry order."""
    return [capability.tag for capability in CAPABILITIES]


def capabilities_in(category):
    return [capability for capability in CAPABILITIES if capability.category == category]


def find_capability(tag):
    """Capability for tag, or None for a tag outside the registry."""
    return _BY_TAG.get(tag)


def is_capability(tag):
    return tag in _BY_TAG
