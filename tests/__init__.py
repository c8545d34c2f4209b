"""Tests for trialforms."""
