"""
Jotter Client: Headless Application Layer
==========================================

What:  Everything the note-taking UI needs except the widgets.
How:   Plain Python on top of httpx and the server's own Pydantic schemas.

Module Inventory:
    - api:         JotterClient, typed calls against the Jotter HTTP API
    - session:     SessionClient, password sign-in / refresh / sign-out at GoTrue
    - forms:       input rules checked before any request is sent
    - notes_view:  upcoming note, search, sorting and deadline labels
    - state:       AppStateMachine driving LoggedOut / Main / Editing / Settings
"""
