"""State layer.

The reducer is the single source of truth for how drive enumeration,
OS/image selection, flashing lifecycle and settings messages change the
application snapshot.  The store holds that snapshot between dispatches.
"""
