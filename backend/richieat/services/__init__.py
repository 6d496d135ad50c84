# Services package init
"""
RICHIEAT Backend — Services Layer
===================================

Service Inventory:
    - SessionIssuer: password hashing, registration, login, token issue/verify
    - ClientService: client CRUD scoped to an advisor, onboarding invitations

Services receive the database session per call and hold no request state,
so a single module-level instance of each is shared by all requests.
"""
