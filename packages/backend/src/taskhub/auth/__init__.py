"""Authentication and authorization.

Learn: Two separate questions get answered for every protected request:
1. Who is calling? → bearer JWT verified by the AuthGate (401 on failure)
2. May they touch this record? → OwnershipPolicy (404 before 403)

The gate proves provenance of the token's claim, not that the referenced
user still exists — operations that need a live user look it up themselves.
"""
