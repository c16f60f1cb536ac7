# SPDX-License-Identifier: Apache-2.0

"""
Privilege classification.

Privileges are stored as free-text names ("Elder", "Regular Pioneer (Sister)").
Each name is matched case-insensitively by substring against a fixed lexicon
and mapped to a set of PrivilegeTag values. Members are classified once when
loaded; aggregation only reads the resulting tags.
"""

from typing import FrozenSet, Iterable, Set, Tuple

from models.enums import PrivilegeTag
from models.responses import PrivilegeFlags

PRIVILEGE_LEXICON: Tuple[Tuple[str, PrivilegeTag], ...] = (
    ("elder", PrivilegeTag.ELDER),
    ("ministerial servant", PrivilegeTag.MINISTERIAL_SERVANT),
    ("regular pioneer", PrivilegeTag.REGULAR_PIONEER),
    ("auxiliary pioneer", PrivilegeTag.AUXILIARY_PIONEER),
    ("special pioneer", PrivilegeTag.SPECIAL_PIONEER),
    ("other sheep", PrivilegeTag.OTHER_SHEEP),
    ("anointed", PrivilegeTag.ANOINTED),
    ("field missionary", PrivilegeTag.FIELD_MISSIONARY),
)


def classify_privilege(name: str) -> Set[PrivilegeTag]:
    """Return the tags whose lexicon phrase occurs in ``name``."""
    if not name:
        return set()

    lowered = name.lower()
    return {tag for phrase, tag in PRIVILEGE_LEXICON if phrase in lowered}


def classify_privileges(names: Iterable[str]) -> FrozenSet[PrivilegeTag]:
    """Union of the tags of every privilege name."""
    tags: Set[PrivilegeTag] = set()
    for name in names:
        tags |= classify_privilege(name)
    return frozenset(tags)


def privilege_flags(tags: Iterable[PrivilegeTag]) -> PrivilegeFlags:
    """
    Build the S-21 privilege flag bundle for a member.

    ``auxiliary_pioneer`` here is the standing privilege only. Whether a
    member reported as auxiliary pioneer in a given month lives on the
    report rows, never in this bundle.

    Other sheep is the unmarked class: it is set for anyone tagged other
    sheep and for anyone not tagged anointed. It is deliberately not set
    unconditionally, so anointed members are not reported as other sheep.
    """
    tag_set = set(tags)
    anointed = PrivilegeTag.ANOINTED in tag_set

    return PrivilegeFlags(
        elder=PrivilegeTag.ELDER in tag_set,
        ministerial_servant=PrivilegeTag.MINISTERIAL_SERVANT in tag_set,
        regular_pioneer=PrivilegeTag.REGULAR_PIONEER in tag_set,
        auxiliary_pioneer=PrivilegeTag.AUXILIARY_PIONEER in tag_set,
        special_pioneer=PrivilegeTag.SPECIAL_PIONEER in tag_set,
        other_sheep=PrivilegeTag.OTHER_SHEEP in tag_set or not anointed,
        anointed=anointed,
        field_missionary=PrivilegeTag.FIELD_MISSIONARY in tag_set,
    )
