"""
Pantry - Validation and data access for household pantry tracking.

Subpackages:
- validation: Entity schemas, validation helpers, sanitization
- db: Supabase client, query cache, validated repositories
"""

__version__ = "1.0.0"
