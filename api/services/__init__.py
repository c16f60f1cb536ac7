# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Services package - MongoDB access, report orchestration, auth and health checks.
"""

from .mongodb import MongoDBService, get_mongodb_service, close_mongodb_connection

__all__ = [
    "MongoDBService",
    "get_mongodb_service",
    "close_mongodb_connection"
]
