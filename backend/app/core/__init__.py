# app/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Default super admin creation and seeding
- context: Shared collaborators (image host, image manager, generation queue)
- db: Database configuration and connection management
- errors / error_handlers: Error hierarchy and its mapping onto the response envelope
- security: Token issuing/decoding and password hashing
"""
