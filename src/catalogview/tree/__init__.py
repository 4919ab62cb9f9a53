"""Domain -> System -> entity tree and its navigation state.

The tree is a flat list of nodes addressed by integer id; parents hold child
ids rather than references, and expansion lives in a separate ``TreeState``.
"""
