# Routes package init
"""
Pikecape Backend - API Routes Package
======================================

Route Inventory:
    - ducks.py:   GET/POST      /api/ducks
                  GET/PUT/DELETE /api/ducks/{uid}
    - health.py:  GET /health   (service health check)

Routes are thin: extract values from the request, call the repository,
pick the status code. Errors are handled globally in main.py.
"""
