"""Application layer: DTOs, backend protocol, services.

Depends only on domain and protocol definitions. Infrastructure implements
the backend protocol (S3, local filesystem).
"""
