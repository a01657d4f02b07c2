"""Application composition layer.

``QuoteEngine`` wires the remote gateway, the graph store and the use cases
for one principal; ``EngineSession`` follows the authentication signal and
``Settings`` reads the environment.
"""
