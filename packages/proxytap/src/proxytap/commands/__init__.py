"""proxytap command modules.

Command functions register themselves via @app.command when their modules
are imported by proxytap.app.
"""
