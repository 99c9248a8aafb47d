"""
Application layer for the campaign management service.

This package contains:
- Command DTOs and handlers for write operations
- Query DTOs and handlers for read operations
- The campaign orchestration service and cross-cutting logging
- Multi-step use cases
"""
