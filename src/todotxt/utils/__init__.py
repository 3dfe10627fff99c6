"""Utility helpers for todotxt."""
