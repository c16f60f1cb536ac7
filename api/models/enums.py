# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the congregation reports service.
"""

from enum import Enum


class FilterType(str, Enum):
    """Member selection used by the field service report."""
    ALL = "all"
    ROLE = "role"
    GROUP = "group"
    PRIVILEGE = "privilege"
    MEMBER = "member"


class PrivilegeTag(str, Enum):
    """Standing classes derived from free-text privilege names."""
    ELDER = "elder"
    MINISTERIAL_SERVANT = "ministerial_servant"
    REGULAR_PIONEER = "regular_pioneer"
    AUXILIARY_PIONEER = "auxiliary_pioneer"
    SPECIAL_PIONEER = "special_pioneer"
    OTHER_SHEEP = "other_sheep"
    ANOINTED = "anointed"
    FIELD_MISSIONARY = "field_missionary"


class ActivityStatus(str, Enum):
    """Publisher activity classification for the activity summary."""
    EXCELLENT = "excellent"
    ACTIVE = "active"
    LOW_ACTIVITY = "low_activity"
    IRREGULAR = "irregular"
    INACTIVE = "inactive"

