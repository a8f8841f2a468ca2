# Services package init
"""
Jotter Backend: Services Layer
===============================

What:  Business logic layer sitting between routes (HTTP) and repositories.
How:   Services receive their collaborators in the constructor; route handlers
       get ready-built instances from jotter.dependencies.

Service Inventory:
    - AuthProvider (abstract): token resolution and user administration
    - SupabaseAuthProvider: GoTrue REST implementation
    - NoteService: note CRUD rules (required fields, not-found handling)
    - ProfileService: profile lookup and password changes
    - SignupService: identity + profile creation with compensation

Routes handle HTTP; services can be tested with fakes and no HTTP at all.
"""
