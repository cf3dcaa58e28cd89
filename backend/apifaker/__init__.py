"""
API Faker — Application Package Initializer
=============================================

What:  A generic REST API over a single JSON document. Top-level keys are
       resources: arrays are collections of items, anything else is a
       singular resource.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Routing Semantics)      │  ← classify, guard, dispatch
    ├─────────────────────────────────────┤
    │     Database (JSON Document)        │  ← primitives, ids, persistence
    └─────────────────────────────────────┘

    Routes never look at the shape of stored values; services never see
    HTTP objects; the database never decides status codes.
"""

__version__ = "1.0.0"
