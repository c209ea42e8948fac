"""
Routes package for the task service.

- api: JSON REST endpoints mounted at ``/api``
"""
