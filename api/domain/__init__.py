# SPDX-License-Identifier: Apache-2.0

"""
Domain logic package for congregation field service reports.

Month arithmetic, privilege classification and report aggregation. All
functions are pure and testable without a database.
"""
