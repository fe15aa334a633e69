"""Outbound event dispatch and collaborator bridges."""
