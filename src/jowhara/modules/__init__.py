"""Jowhara Modules - Admin areas."""
