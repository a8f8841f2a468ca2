"""
Jotter Backend: Repositories
=============================

What:  Own the per-user key namespace on top of the key-value store.

Inventory:
    - keys.py:                 key builders (the only place keys are spelled out)
    - notes_repository.py:     NotesRepository.list_by_user / get / create / update / delete
    - profile_repository.py:   ProfileRepository.get / create

Every method takes the authenticated user id as its first argument; services
never build keys themselves.
"""
