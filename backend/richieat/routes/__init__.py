# Routes package init
"""
RICHIEAT Backend — API Routes Package
=======================================

Route Inventory:
    - health.py:   GET  /                      (health check)
    - auth.py:     POST /api/auth/register, POST /api/auth/login,
                   GET/PUT /api/auth/profile, POST /api/auth/logout
    - clients.py:  /api/clients CRUD and onboarding

Routes are THIN: extract the request data, call a service, shape the
response. Business rules live in services.
"""
