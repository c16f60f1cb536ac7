# SPDX-License-Identifier: Apache-2.0

"""
Middleware package for request processing.

This package contains the authentication, validation and error handling
components applied to the report endpoints.
"""
