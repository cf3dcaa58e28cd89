# Routes package init
"""
API Faker — API Routes Package
================================

Route Inventory:
    - resources.py:     /db, /{resource}, /{resource}/{item_id} (all verbs)
    - dependencies.py:  service lookup, body parsing, Content-Type warning

Routes stay THIN: extract path and body, call ResourceService, pick the
status code. The rules live in services/resource_service.py.
"""
