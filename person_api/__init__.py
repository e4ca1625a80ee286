"""Person API.

A REST service for managing Person records: a FastAPI transport, a service
layer enforcing email uniqueness under a per-operation deadline, and a
SQLModel-backed repository.
"""

__version__ = "0.1.0"
