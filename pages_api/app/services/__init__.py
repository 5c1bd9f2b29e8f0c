"""
Service layer.

``store`` maps entities to SQLite tables; the ``*_service`` modules
hold the business logic for each resource and are what the API
handlers call.  ``playlist_links`` keeps playlists in step with track
memberships, and ``media_service`` talks to Cloudinary.
"""
