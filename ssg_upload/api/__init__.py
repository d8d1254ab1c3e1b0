"""Submission collaborator for the remote SSG API."""
