"""Resolve source files to their Git repositories and hosted browse URLs."""
