"""
Adapter layer for the file broker.

Contains the file store adapters (local disk/S3) consumed by the orchestrators.
Provides mode-aware implementations that work across deployment environments.
"""
