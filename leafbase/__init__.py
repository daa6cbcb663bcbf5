"""
Leafbase API.

Authentication backend for the Leafbase catalog:
- User registration and login
- Bearer token issuing and verification
- Request authentication dependency
"""
__version__ = "0.1.0"
