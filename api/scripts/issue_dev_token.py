#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Issue an access token for calling the report endpoints locally.

Signs with JWT_PRIVATE_KEY. With --generate-keys a fresh RSA key pair is
printed as environment variables instead; export both before starting the
API so the issued tokens verify.
"""

import argparse
import os
import sys

# Add the parent directory to the path so we can import from api
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from middleware.auth import REPORT_READ_PERMISSION
from services.auth import AuthService, generate_key_pair


def print_key_pair():
    private_key, public_key = generate_key_pair()
    newline = "\\n"
    print(f'JWT_PRIVATE_KEY="{private_key.replace(chr(10), newline)}"')
    print(f'JWT_PUBLIC_KEY="{public_key.replace(chr(10), newline)}"')


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--generate-keys", action="store_true", help="print a new key pair and exit")
    parser.add_argument("--user-id", default="dev-user")
    parser.add_argument("--name", default="Developer")
    parser.add_argument("--congregation-id", default=None)
    parser.add_argument(
        "--permission",
        action="append",
        dest="permissions",
        help=f"permission to grant (repeatable, default {REPORT_READ_PERMISSION})"
    )
    args = parser.parse_args(argv)

    if args.generate_keys:
        print_key_pair()
        return 0

    private_key = os.getenv("JWT_PRIVATE_KEY", "").replace("\\n", "\n")
    if not private_key:
        print("JWT_PRIVATE_KEY is not set; run with --generate-keys first", file=sys.stderr)
        return 1

    auth_service = AuthService(private_key=private_key, public_key=os.getenv("JWT_PUBLIC_KEY"))
    token = auth_service.generate_access_token(
        args.user_id,
        args.permissions or [REPORT_READ_PERMISSION],
        name=args.name,
        congregation_id=args.congregation_id
    )
    print(token["access_token"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
