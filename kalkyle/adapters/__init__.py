"""Adapter package for remote-store implementations.

Purpose:
    Collect concrete implementations of ``RemoteGateway``: the PostgREST
    client used in production and an in-memory double used by tests and
    offline runs.

Dependencies:
    ``supabase_rest`` and ``http_client`` depend on ``requests``; the row
    mapping and the in-memory gateway only depend on the domain package.

Call context:
    Imported by ``kalkyle.app`` for runtime wiring and by tests.
"""
