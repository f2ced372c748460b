"""Schema migration package."""

from wealthflow.migrations.migrator import (
    LEGACY_SCHEMA_VERSION,
    MIGRATIONS,
    create_default_store,
    detect_schema_version,
    migrate,
    migrate_v1_to_v2,
)

__all__ = [
    "LEGACY_SCHEMA_VERSION",
    "MIGRATIONS",
    "create_default_store",
    "detect_schema_version",
    "migrate",
    "migrate_v1_to_v2",
]
