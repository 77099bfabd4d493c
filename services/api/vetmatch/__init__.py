"""Veteran resource matching and conversational triage engine."""
