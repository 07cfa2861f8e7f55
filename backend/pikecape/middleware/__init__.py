# Middleware package init
"""
Pikecape Backend - Middleware Package
======================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: assigns the correlation ID the other layers log with
    2. Logging: one access line per request, with status and duration
    3. CORS: FastAPI's CORSMiddleware (handles preflight)
"""
