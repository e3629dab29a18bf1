# Routes package init
"""
Cyber Kitchen Backend — API Routes Package
============================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - recipes.py:  GET/POST /api/recipes          (load / replace collection)
    - media.py:    POST   /api/upload             (store an image)
                   DELETE /api/file, /api/folder  (remove media)
                   POST   /api/rename-folder      (move a folder)
    - imports.py:  POST   /api/import-recipe      (scrape a recipe page)
    - health.py:   GET    /health                 (service health check)

Routes stay thin: extract request data, call a service, shape the response.
"""
