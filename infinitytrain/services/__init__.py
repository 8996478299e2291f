"""Persistence services and progress aggregation."""
