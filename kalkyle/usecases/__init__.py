"""Use-case layer for the synchronization engine.

Each module pairs one remote gateway call with the graph transition it
confirms. Use cases raise ``EngineError`` subclasses; ``QuoteEngine`` turns
those into ``Result`` values at the public boundary.
"""
