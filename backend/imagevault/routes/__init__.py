# Routes package init
"""
ImageVault Backend — API Routes Package
=========================================

Route Inventory:
    - images.py:   POST /api/images, GET /api/images,
                   GET /api/images/{id}, PUT /api/images/{id}
    - uploads.py:  GET  /uploads/{filename}   (stored files)
    - health.py:   GET  /health               (store connectivity)

Routes are thin: extract request data, call a service, return its result.
"""
