# Routes package init
"""
Quillboard Backend: API Routes Package
=======================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - auth.py:        POST /api/auth/register, POST /api/auth/login, GET /api/auth/me
    - posts.py:       GET/POST /api/posts, GET/PUT/DELETE /api/posts/{id}
    - comments.py:    GET/POST /api/posts/{id}/comments
    - categories.py:  GET/POST /api/categories
    - uploads.py:     GET /uploads/{path}   (stored post images)
    - health.py:      GET /health
    - deps.py:        shared dependencies (bearer identity, post body parsing)

Routes stay thin: extract the request data, call a service, wrap the result
in the response envelope. Business rules live in quillboard.services.
"""
