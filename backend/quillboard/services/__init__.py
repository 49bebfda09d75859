# Services package init
"""
Quillboard Backend: Services Layer
===================================

What:  Business logic between routes (HTTP) and the database.
How:   Each service takes an AsyncSession and, for writes, an explicit
       Identity; it validates, authorizes, persists and returns response
       models. Module-level singletons are imported by the routes.

Service Inventory:
    - AccessControl:    bearer token → Identity, owner-or-admin checks
    - PostService:      post CRUD, listing, featured image lifecycle
    - query_builder:    listing filters, ordering and page metadata
    - FileService:      image validation, storage, serving and cleanup
    - CommentService:   comments on posts
    - CategoryService:  category listing and admin creation
    - AuthService:      registration, login, current user
"""
