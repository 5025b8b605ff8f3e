"""Shared base models."""
