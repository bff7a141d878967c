"""
Services Module

Business logic behind the routers:
- categories / prompts / favorites: CRUD and serialization
- images: Image records kept in step with the external image host
- image_host: Cloudinary upload API client
- generation: Image generation providers (placeholder, webhook)
- lifecycle: Prompt status state machine and the generation queue
"""
