#!/usr/bin/env python3
"""
Password Hash Generator
Generates the bcrypt ADMIN_PASSWORD_HASH for the studio CMS .env file.
"""
import getpass
import sys

from studio_cms.utils.auth import hash_password, verify_password


def main() -> int:
    print("=" * 60)
    print("Studio CMS Admin Password Hash Generator")
    print("=" * 60)
    print()

    password = getpass.getpass("Enter admin password: ")
    if not password:
        print("\n❌ Error: Password cannot be empty")
        return 1

    if password != getpass.getpass("Confirm password: "):
        print("\n❌ Error: Passwords do not match")
        return 1

    print("\n⏳ Generating hash (this may take a moment)...")
    hashed = hash_password(password)

    # Round-trip once so a broken bcrypt install is caught here, not at login
    if not verify_password(password, hashed):
        print("\n❌ Error: Generated hash failed verification")
        return 1

    print("\n✅ Success! Copy this line to your .env file:\n")
    print(f"ADMIN_PASSWORD_HASH={hashed}")
    print()
    print("⚠️  Keep this hash secret and never commit it to version control!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
