"""
Services module for business logic.

- crud/: Generic viewset, entity descriptor, repository, query building, soft delete
"""
