"""Domain layer for smsledger: the message-to-transaction pipeline.

Submodules are imported directly (``smsledger.domain.sync`` and so on) so
that the database layer can import the entities without a cycle.
"""
