"""The playlists application: accounts, sessions and personal playlists.

Build it with ``create_app()``::

    from setlist.playlists.app import create_app

    app = create_app()
    app.run()
"""
