"""
Order management core: typed identities, versioned aggregates and the
commands that mutate them through a transactional store.
"""

__version__ = "0.1.0"
