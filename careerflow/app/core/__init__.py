"""Core package: configuration, security, authentication and error types.

Notes:
    1. This file is intentionally empty apart from this docstring.
    2. No operations are performed on import.

"""
