"""Consumers of photo upload notifications."""
