"""
Image Cache Domain Module

Domain types for the single-artifact image cache.
Contains entities, value objects, collaborator interfaces, and exceptions.
"""
