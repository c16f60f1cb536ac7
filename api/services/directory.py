# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Member directory lookups and filter catalog.

Members are loaded with their privilege and group references resolved to
names, and their privileges classified into tags once at load time.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from opentelemetry import trace
from pymongo import ASCENDING

from domain.privileges import classify_privileges
from models.entities import Group, Member, Privilege, ReportPublisher
from models.enums import FilterType
from models.responses import FilterOptions, NamedOption
from .mongodb import MongoDBService, to_object_id, to_object_ids

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

REGULAR_PIONEER_PATTERN = "regular pioneer"

# Matches no document; used for identifier filters that are not valid ObjectIds
MATCH_NOTHING = {"_id": {"$in": []}}


def _id_constraint(field: str, value: str) -> Dict[str, Any]:
    object_id = to_object_id(value)
    if object_id is None:
        return dict(MATCH_NOTHING)
    return {field: object_id}


def build_member_query(filter_type: Any, filter_value: Optional[str] = None) -> Dict[str, Any]:
    """
    Translate a report filter into a members collection query.

    Args:
        filter_type: FilterType or its string value
        filter_value: Role name, group ID, privilege ID or member ID

    Returns:
        MongoDB query document

    Raises:
        ValueError: If the filter type is not recognized
    """
    filter_type = FilterType(filter_type)

    if filter_type == FilterType.ALL or not filter_value:
        return {}

    if filter_type == FilterType.ROLE:
        return {"role": filter_value}
    if filter_type == FilterType.GROUP:
        return _id_constraint("groupId", filter_value)
    if filter_type == FilterType.PRIVILEGE:
        return _id_constraint("privileges", filter_value)
    return _id_constraint("_id", filter_value)


def _sort_by_name(members: List[Member]) -> List[Member]:
    return sorted(members, key=lambda member: member.full_name)


class MemberDirectoryService:
    """Read access to members with resolved privileges and groups."""

    def __init__(self, mongodb_service: MongoDBService):
        self.mongodb_service = mongodb_service

    def find_by_filter(self, filter_type: Any, filter_value: Optional[str] = None) -> List[Member]:
        """Members matching a report filter, sorted by full name."""
        query = build_member_query(filter_type, filter_value)

        with tracer.start_as_current_span(
            "db.members.find_by_filter",
            attributes={
                "filter.type": str(getattr(filter_type, "value", filter_type)),
                "filter.has_value": bool(filter_value)
            }
        ) as span:
            members = self.find_members(query)
            span.set_attribute("db.returned_count", len(members))
            return members

    def find_all(self, group_id: Optional[str] = None, role: Optional[str] = None) -> List[Member]:
        """All members, optionally restricted to one group and/or role."""
        query: Dict[str, Any] = {}
        if group_id:
            query.update(_id_constraint("groupId", group_id))
        if role:
            query["role"] = role
        return self.find_members(query)

    def find_by_ids(self, member_ids: Iterable[str]) -> Dict[str, Member]:
        """Members keyed by ID; unknown IDs are absent from the result."""
        object_ids = to_object_ids(member_ids)
        if not object_ids:
            return {}
        members = self.find_members({"_id": {"$in": object_ids}})
        return {member.id: member for member in members}

    def find_regular_pioneers(self) -> List[Member]:
        """
        Members holding a privilege whose name contains "regular pioneer".

        Returns an empty list when no such privilege exists.
        """
        with tracer.start_as_current_span("db.members.find_regular_pioneers") as span:
            privilege_docs = list(self.mongodb_service.privileges.find(
                {"name": {"$regex": REGULAR_PIONEER_PATTERN, "$options": "i"}},
                {"_id": 1}
            ))
            privilege_ids = [doc["_id"] for doc in privilege_docs]

            span.set_attribute("db.privilege_count", len(privilege_ids))
            if not privilege_ids:
                logger.info("No regular pioneer privilege defined")
                return []

            members = self.find_members({"privileges": {"$in": privilege_ids}})
            span.set_attribute("db.returned_count", len(members))
            return members

    def find_members(self, query: Mapping[str, Any]) -> List[Member]:
        """Run a members query and resolve references on the results."""
        documents = list(self.mongodb_service.members.find(dict(query)).sort("fullName", ASCENDING))
        return _sort_by_name(self._build_members(documents))

    def resolve_publishers(self, publisher_ids: Iterable[Any]) -> Dict[str, ReportPublisher]:
        """Publisher snapshots keyed by member ID, for attaching to reports."""
        object_ids = to_object_ids(set(str(pid) for pid in publisher_ids))
        if not object_ids:
            return {}

        documents = list(self.mongodb_service.members.find(
            {"_id": {"$in": object_ids}},
            {"fullName": 1, "privileges": 1}
        ))
        privilege_names = self._privilege_names(documents)

        publishers = {}
        for document in documents:
            names = [
                privilege_names[str(pid)]
                for pid in document.get("privileges") or []
                if str(pid) in privilege_names
            ]
            publisher = ReportPublisher(
                id=str(document["_id"]),
                full_name=document.get("fullName") or "",
                privilege_names=names,
                privilege_tags=classify_privileges(names)
            )
            publishers[publisher.id] = publisher
        return publishers

    def _load_privileges(self, privilege_ids: Sequence[Any]) -> Dict[str, Privilege]:
        if not privilege_ids:
            return {}
        docs = self.mongodb_service.privileges.find({"_id": {"$in": list(privilege_ids)}})
        privileges = [Privilege.from_document(doc) for doc in docs]
        return {privilege.id: privilege for privilege in privileges}

    def _privilege_names(self, documents: Sequence[Mapping[str, Any]]) -> Dict[str, str]:
        ids = {pid for doc in documents for pid in doc.get("privileges") or []}
        return {pid: p.name for pid, p in self._load_privileges(list(ids)).items()}

    def _load_groups(self, group_ids: Sequence[Any]) -> Dict[str, Group]:
        if not group_ids:
            return {}
        docs = self.mongodb_service.groups.find({"_id": {"$in": list(group_ids)}})
        groups = [Group.from_document(doc) for doc in docs]
        return {group.id: group for group in groups}

    def _build_members(self, documents: Sequence[Mapping[str, Any]]) -> List[Member]:
        privilege_ids = {pid for doc in documents for pid in doc.get("privileges") or []}
        group_ids = {doc["groupId"] for doc in documents if doc.get("groupId")}

        privileges = self._load_privileges(list(privilege_ids))
        groups = self._load_groups(list(group_ids))

        members = []
        for document in documents:
            member_privileges = [
                privileges[str(pid)]
                for pid in document.get("privileges") or []
                if str(pid) in privileges
            ]
            names = [privilege.name for privilege in member_privileges]
            group_id = str(document["groupId"]) if document.get("groupId") else None
            group = groups.get(group_id) if group_id else None

            members.append(Member(
                id=str(document["_id"]),
                full_name=document.get("fullName") or "",
                dob=document.get("dob"),
                baptized_date=document.get("baptizedDate"),
                gender=document.get("gender") or "",
                role=document.get("role") or "publisher",
                privilege_ids=[str(pid) for pid in document.get("privileges") or []],
                group_id=group_id,
                privilege_names=names,
                group_name=group.name if group else None,
                privilege_tags=classify_privileges(names),
                excluded_from_activities=any(p.exclude_from_activities for p in member_privileges),
                created_at=document.get("createdAt"),
                updated_at=document.get("updatedAt")
            ))

        logger.debug(
            "Resolved member references",
            extra={
                "member_count": len(members),
                "privilege_count": len(privileges),
                "group_count": len(groups)
            }
        )
        return members


class FilterCatalogService:
    """Selectable values for the report filter form."""

    def __init__(self, mongodb_service: MongoDBService):
        self.mongodb_service = mongodb_service

    def get_filter_options(self) -> FilterOptions:
        with tracer.start_as_current_span("db.filter_options.get") as span:
            db = self.mongodb_service

            roles = [
                NamedOption(id=str(doc["_id"]), name=doc["name"])
                for doc in db.roles.find({}, {"name": 1}).sort("name", ASCENDING)
            ]
            known_roles = {role.name for role in roles}
            for role_name in sorted(r for r in db.members.distinct("role") if r):
                if role_name not in known_roles:
                    roles.append(NamedOption(id=role_name, name=role_name))

            groups = [
                NamedOption(id=str(doc["_id"]), name=doc["name"])
                for doc in db.groups.find({}, {"name": 1}).sort("name", ASCENDING)
            ]
            privileges = [
                NamedOption(id=str(doc["_id"]), name=doc["name"])
                for doc in db.privileges.find({}, {"name": 1}).sort("name", ASCENDING)
            ]
            members = [
                NamedOption(id=str(doc["_id"]), name=doc.get("fullName") or "")
                for doc in db.members.find({}, {"fullName": 1}).sort("fullName", ASCENDING)
            ]

            span.set_attributes({
                "filter_options.roles": len(roles),
                "filter_options.groups": len(groups),
                "filter_options.privileges": len(privileges),
                "filter_options.members": len(members)
            })

            return FilterOptions(roles=roles, groups=groups, privileges=privileges, members=members)
