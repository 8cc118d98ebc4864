"""FastAPI application and REST API endpoints.

This module contains:
- Main FastAPI application configuration
- Request interceptors (security headers, CORS, rate limiting)
- Authentication and story authorization dependencies
- Story, collaborator and comment endpoints
"""
