"""FastAPI application module.

Contains the application, configuration, logging setup, error handlers and
route handlers exposing the recommendation engine over HTTP.
"""
