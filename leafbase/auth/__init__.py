"""
Authentication service for Leafbase.

This package provides:
- User registration and login
- Password hashing (bcrypt)
- JWT access tokens
- Bearer token authentication for protected routes
"""
