"""
The trait catalog table.

Catalog modules call register_trait() once per TraitKind at import time.
Lookups by trait kind and by command name go through this table only.
"""

import logging
from typing import Dict, FrozenSet, Iterator, Tuple, Union

from ..errors import UnknownCommandError, UnsupportedTraitError
from .base import CommandSpec, TraitKind, TraitSpec, command_name

logger = logging.getLogger(__name__)

TRAIT_CATALOG: Dict[TraitKind, TraitSpec] = {}

# command name -> owning trait
_COMMAND_INDEX: Dict[str, TraitSpec] = {}


def register_trait(spec: TraitSpec) -> TraitSpec:
    """Add a trait to the catalog. Trait kinds and command names must be unique."""
    if spec.kind in TRAIT_CATALOG:
        raise ValueError(f"Trait already registered: {spec.kind.short_name}")

    for command in spec.commands:
        owner = _COMMAND_INDEX.get(command.name)
        if owner is not None:
            raise ValueError(f"Command {command.name} already registered by {owner.short_name}")

    TRAIT_CATALOG[spec.kind] = spec
    for command in spec.commands:
        _COMMAND_INDEX[command.name] = spec

    logger.debug(f"Registered trait {spec.short_name} ({len(spec.commands)} commands)")
    return spec


def get_trait(kind: Union[TraitKind, str]) -> TraitSpec:
    """Look up a trait by kind or name. Raises UnsupportedTraitError."""
    trait_kind = TraitKind.parse(kind)
    spec = TRAIT_CATALOG.get(trait_kind)
    if spec is None:
        raise UnsupportedTraitError(trait_kind.short_name)
    return spec


def find_command(name: str) -> Tuple[TraitSpec, CommandSpec]:
    """Look up a command by full or short name. Raises UnknownCommandError."""
    full_name = command_name(name)
    trait = _COMMAND_INDEX.get(full_name)
    if trait is None:
        raise UnknownCommandError(name)
    return trait, trait.get_command(full_name)


def iter_traits() -> Iterator[TraitSpec]:
    """Iterate catalog entries in trait-name order."""
    for kind in sorted(TRAIT_CATALOG, key=lambda k: k.value):
        yield TRAIT_CATALOG[kind]


def replaced_state_fields() -> FrozenSet[str]:
    """State fields that a delta replaces whole, such as the one-of ``color``."""
    fields = set()
    for spec in TRAIT_CATALOG.values():
        fields.update(spec.replaced_states)
    return frozenset(fields)


def all_error_codes() -> FrozenSet[str]:
    """Every trait-scoped vendor error code in the catalog."""
    codes = set()
    for spec in TRAIT_CATALOG.values():
        codes.update(spec.error_codes)
    return frozenset(codes)
