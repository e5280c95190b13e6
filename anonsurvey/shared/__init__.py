"""Shared models, storage and utilities for the submission service."""
