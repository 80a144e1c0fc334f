"""Tenancy bounded context.

Routes each unit of work to its tenant's database: resolves tenant
identifiers against the registry, caches resolutions, and manages one
connection pool per distinct set of tenant database coordinates.
"""
