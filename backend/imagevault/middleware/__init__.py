# Middleware package init
"""
ImageVault Backend — Middleware Package
=========================================

Middleware Chain (outermost first):
    Request → [Request context] → [CORS] → Route Handler

    1. Request context: request id, unmapped-error 500s, access log line
    2. CORS: FastAPI's CORSMiddleware (handles preflight)
"""
