"""
Drink log relay.

A FastAPI service that lets a static front-end keep per-person daily drink
records in a JSON file stored in a GitHub repository, using the repository
contents API as the durable store.
"""
