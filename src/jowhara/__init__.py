"""Jowhara - Catalog admin API on Supabase."""

__version__ = "0.1.0"
