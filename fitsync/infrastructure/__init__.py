"""Infrastructure layer (persistence and remote I/O).

Code here talks to the outside world: the local key/value store and the HTTP
API. It should not hold domain state.
"""
