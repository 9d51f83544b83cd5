"""Chenaniah training program administration API."""
