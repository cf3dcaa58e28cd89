# Middleware package init
"""
API Faker — Middleware Package
================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first, so every later log line can carry it
    2. Logging measures duration and status of everything below it
    3. GZip / CORS are FastAPI's stock middleware
"""
