"""Domain layer (records and error types).

Domain modules should not depend on I/O. Parsing from and to the server's JSON
shape lives with the records themselves.
"""
