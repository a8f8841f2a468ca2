# Routes package init
"""
Jotter Backend: API Routes Package
===================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - health.py:   GET    /health
    - signup.py:   POST   /signup
    - profile.py:  GET    /profile
                   POST   /profile/password
    - notes.py:    GET    /notes
                   POST   /notes
                   PUT    /notes/{id}
                   DELETE /notes/{id}

All routers are mounted under settings.api_prefix (empty by default).

Design Principle:
    Routes stay thin: authenticate, call the service, wrap the result.
    Business rules live in jotter.services.
"""
