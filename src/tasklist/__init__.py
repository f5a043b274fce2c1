"""
Task list package.

Layers, leaf first: key-value stores (storage, db), the JSON persistence
adapter, the task repository, rendering into display targets, the
coordinator that ties user actions to a refresh, and the FastAPI app in
main (run with: uvicorn tasklist.main:app).
"""

__version__ = "0.1.0"
