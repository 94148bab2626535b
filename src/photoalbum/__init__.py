"""Desktop photo organizer core: users, albums, tagged photos and search."""

__version__ = "0.1.0"
