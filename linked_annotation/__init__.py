"""Linked image/text annotation: boxes on an image linked to spans of text."""
