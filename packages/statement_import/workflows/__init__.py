"""Multi-step workflows built on the parsing and matching primitives."""
