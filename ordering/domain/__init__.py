"""
Domain layer - Contains entities, value objects, and the store contracts they are persisted through.
This layer is independent of external concerns and contains the core business logic.
"""
