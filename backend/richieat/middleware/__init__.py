# Middleware package init
"""
RICHIEAT Backend — Middleware Package
=======================================

Cross-cutting concerns applied to every request, assembled by
`pipeline.RequestPipeline` in a fixed, declared order:

    Request → [Request ID] → [Access Log] → [Security Log] → [CORS]
            → [Body Limit] → Route Handler

`errors.error_response` builds the shared JSON error envelope used by the
stages that answer requests themselves (CORS 403, body 413) and by the
global exception handlers.
"""
