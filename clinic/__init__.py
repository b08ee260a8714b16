"""Clinic administration app: accounts, access control, scheduling,
directories and memberships."""
