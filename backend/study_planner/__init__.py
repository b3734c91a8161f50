"""Application package for the personal study-planner backend.

This package exposes the service, repository and model modules used by
the FastAPI application: user registration/login, bearer-token sessions
and per-user study plans with a target date.
"""
