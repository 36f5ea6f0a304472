"""
Notekeeper Client Core.

Application logic of the note-taking front end, independent of any
rendering layer:

- context.py: application context (API client, session, theme)
- auth.py: sign-in/sign-up and the route gate
- store.py: note store client over the REST API
- feed.py: change feed for note subscribers
- listing.py: folder/search/sort view-model
- autosave.py: debounced autosave of an open note
- lifecycle.py: trash, restore and purge
"""
