# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models for report endpoints.

Month bounds are validated here so malformed keys never reach the range
queries, which compare stored ``YYYY-MM`` strings lexically.
"""

from typing import Optional
from pydantic import Field, field_validator, model_validator
from .base import CamelModel
from .enums import FilterType
from domain.months import MonthKey


def _validate_month_key(value: str) -> str:
    """Normalize and validate a YYYY-MM key."""
    return str(MonthKey.parse(value))


class MonthRangeRequest(CamelModel):
    """Inclusive month range shared by range-based reports."""

    start_month: str = Field(..., description="First month (YYYY-MM)")
    end_month: str = Field(..., description="Last month (YYYY-MM)")

    @field_validator('start_month', 'end_month')
    @classmethod
    def validate_month(cls, v):
        """Validate month key format."""
        return _validate_month_key(v)

    @model_validator(mode='after')
    def validate_range(self):
        """Start month cannot be after end month."""
        if self.start > self.end:
            raise ValueError('startMonth must not be after endMonth')
        return self

    @property
    def start(self) -> MonthKey:
        return MonthKey.parse(self.start_month)

    @property
    def end(self) -> MonthKey:
        return MonthKey.parse(self.end_month)


class FieldServiceReportRequest(MonthRangeRequest):
    """Request for the filtered field service report."""

    filter_type: FilterType = Field(..., description="Member selection discriminant")
    filter_value: Optional[str] = Field(
        None,
        description="Role name, group ID, privilege ID or member ID"
    )

    @field_validator('filter_value')
    @classmethod
    def validate_filter_value(cls, v):
        """Blank values count as absent."""
        if v is None:
            return None
        v = v.strip()
        return v or None


class PioneerSummaryRequest(MonthRangeRequest):
    """Request for the pioneer summary report."""


class ActivitySummaryRequest(MonthRangeRequest):
    """Request for the publisher activity summary."""

    group_id: Optional[str] = Field(None, description="Restrict to one group")
    role: Optional[str] = Field(None, description="Restrict to one role")


class MonthQuery(CamelModel):
    """Single-month query parameters."""

    month: str = Field(..., description="Report month (YYYY-MM)")
    group_id: Optional[str] = Field(None, description="Restrict to one group")

    @field_validator('month')
    @classmethod
    def validate_month(cls, v):
        """Validate month key format."""
        return _validate_month_key(v)

    @property
    def month_key(self) -> MonthKey:
        return MonthKey.parse(self.month)
