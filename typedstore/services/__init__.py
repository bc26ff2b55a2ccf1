"""
Storage services for typedstore.

- preferences: durable string-key to bytes services
- storage: typed key-value store over a preferences service
- cache: in-memory caches and the shared per-type registry
- bindings: declarative accessors over both
"""
