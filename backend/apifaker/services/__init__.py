# Services package init
"""
API Faker — Services Layer
============================

Service Inventory:
    - ResourceService: per-verb routing semantics over the Database
    - resource_view:   Collection / Singular / Missing classification and
                       the shallow merge used by singular PATCH
"""
