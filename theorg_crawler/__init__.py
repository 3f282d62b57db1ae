"""Resumable crawler for the TheOrg company directory."""
