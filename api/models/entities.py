# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the congregation reports service.

Entities are read-only snapshots of MongoDB documents. Stored field names are
camelCase (``fullName``, ``groupId``); the ``from_document`` constructors map
them onto these models.
"""

from datetime import datetime
from typing import List, Optional, Dict, Any, FrozenSet, Mapping
from pydantic import BaseModel, Field, field_validator, ConfigDict
from .base import BaseDocument
from .enums import PrivilegeTag


def _document_id(document: Mapping[str, Any]) -> str:
    """Return a document's identifier as a string."""
    raw_id = document.get("_id", document.get("id"))
    return str(raw_id) if raw_id is not None else ""


class Privilege(BaseDocument):
    """Named congregational privilege ("Elder", "Regular Pioneer", ...)."""

    name: str = Field(default="", description="Privilege name; blank names classify to no tags")
    exclude_from_activities: bool = Field(
        default=False,
        description="Holders are left out of activity summaries"
    )

    @field_validator('name', mode='before')
    @classmethod
    def validate_name(cls, v):
        """Normalize privilege name; missing names are blank."""
        return str(v or "").strip()

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "Privilege":
        return cls(
            id=_document_id(document),
            name=document.get("name"),
            exclude_from_activities=bool(document.get("excludeFromActivities", False)),
            created_at=document.get("createdAt"),
            updated_at=document.get("updatedAt")
        )


class Group(BaseDocument):
    """Organizational subdivision of members."""

    name: str = Field(default="", description="Group name")

    @field_validator('name', mode='before')
    @classmethod
    def validate_name(cls, v):
        return str(v or "").strip()

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "Group":
        return cls(
            id=_document_id(document),
            name=document.get("name"),
            created_at=document.get("createdAt"),
            updated_at=document.get("updatedAt")
        )


class Member(BaseDocument):
    """Member with resolved privilege and group names."""

    full_name: str = Field(..., description="Member full name")
    dob: Optional[datetime] = Field(None, description="Date of birth")
    baptized_date: Optional[datetime] = Field(None, description="Baptism date")
    gender: str = Field(default="", description="Gender")
    role: str = Field(default="publisher", description="Member role")
    privilege_ids: List[str] = Field(default_factory=list, description="Privilege references")
    group_id: Optional[str] = Field(None, description="Group reference")
    privilege_names: List[str] = Field(default_factory=list, description="Resolved privilege names")
    group_name: Optional[str] = Field(None, description="Resolved group name")
    privilege_tags: FrozenSet[PrivilegeTag] = Field(
        default_factory=frozenset,
        description="Tags classified from privilege names"
    )
    excluded_from_activities: bool = Field(
        default=False,
        description="Holds a privilege that excludes them from activity summaries"
    )

    @field_validator('full_name')
    @classmethod
    def validate_full_name(cls, v):
        """Normalize full name."""
        return str(v or "").strip()

    @field_validator('privilege_ids')
    @classmethod
    def validate_privilege_ids(cls, v):
        """Privileges form a set; drop repeated references keeping first position."""
        seen = []
        for privilege_id in v:
            if privilege_id not in seen:
                seen.append(privilege_id)
        return seen

    def has_tag(self, tag: PrivilegeTag) -> bool:
        return tag in self.privilege_tags

    @property
    def is_regular_pioneer(self) -> bool:
        return self.has_tag(PrivilegeTag.REGULAR_PIONEER)


class ReportPublisher(BaseModel):
    """Publisher snapshot attached to a fetched report."""

    id: str = Field(..., description="Member ID")
    full_name: str = Field(default="", description="Member full name")
    privilege_names: List[str] = Field(default_factory=list, description="Resolved privilege names")
    privilege_tags: FrozenSet[PrivilegeTag] = Field(default_factory=frozenset)

    @property
    def is_regular_pioneer(self) -> bool:
        return PrivilegeTag.REGULAR_PIONEER in self.privilege_tags


class FieldServiceReport(BaseDocument):
    """One monthly field service submission by a publisher."""

    publisher_id: str = Field(..., description="Publisher member ID")
    publisher: Optional[ReportPublisher] = Field(None, description="Resolved publisher")
    month: str = Field(..., description="Report month key (YYYY-MM)")
    hours: float = Field(default=0, description="Hours reported")
    bible_students: int = Field(default=0, description="Bible studies conducted")
    auxiliary_pioneer: bool = Field(default=False, description="Served as auxiliary pioneer this month")
    comments: str = Field(default="", description="Remarks")

    @field_validator('hours', mode='before')
    @classmethod
    def validate_hours(cls, v):
        """Missing hours count as zero."""
        return v or 0

    @field_validator('bible_students', mode='before')
    @classmethod
    def validate_bible_students(cls, v):
        """Missing Bible study counts are zero."""
        return v or 0

    @field_validator('comments', mode='before')
    @classmethod
    def validate_comments(cls, v):
        return v or ""

    @classmethod
    def from_document(
        cls,
        document: Mapping[str, Any],
        publisher: Optional[ReportPublisher] = None
    ) -> "FieldServiceReport":
        return cls(
            id=_document_id(document),
            publisher_id=str(document["publisher"]),
            publisher=publisher,
            month=document["month"],
            hours=document.get("hours"),
            bible_students=document.get("bibleStudents"),
            auxiliary_pioneer=bool(document.get("auxiliaryPioneer", False)),
            comments=document.get("comments"),
            created_at=document.get("createdAt"),
            updated_at=document.get("updatedAt")
        )


class UserContext(BaseModel):
    """Authenticated caller context built from the bearer token."""

    user_id: str = Field(..., description="Authenticated user ID")
    congregation_id: Optional[str] = Field(None, description="User's congregation ID")
    email: Optional[str] = Field(None, description="User email")
    name: Optional[str] = Field(None, description="User display name")
    permissions: List[str] = Field(default_factory=list, description="User's effective permissions")
    token_payload: Optional[Dict[str, Any]] = Field(None, description="Original JWT payload")
    ip_address: Optional[str] = Field(None, description="Client IP address")
    user_agent: Optional[str] = Field(None, description="Client user agent")

    model_config = ConfigDict(
        use_enum_values=True
    )

    @property
    def display_name(self) -> str:
        """Name recorded as ``generatedBy`` on reports."""
        return self.name or self.user_id

    def has_permission(self, permission: str) -> bool:
        """Check if user has a specific permission."""
        return permission in self.permissions
