"""Package locking: resolve package specs into lockable records.

- errors.py: resolution error taxonomy
- models.py: ResolvedPackage / SystemInfo records
- schema.py: JSON schema for persisted records
- select.py: representative platform selection
- fanout.py: concurrent per-platform store path lookup
- resolve.py: PackageResolver and ResolutionStrategy
"""
