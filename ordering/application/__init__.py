"""
Application layer - Commands and queries orchestrating the domain through its collaborators.
"""
