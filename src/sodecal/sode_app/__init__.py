"""Standalone NiceGUI application for SODE calendars."""
