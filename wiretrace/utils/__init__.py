"""Utility helpers for wiretrace."""
