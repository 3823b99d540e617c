"""Retrospective board engine: vote reconciliation, card grouping and presence, stored on a git branch."""
