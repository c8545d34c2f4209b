"""Utility modules for trialforms."""
