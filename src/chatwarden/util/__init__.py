"""
Utility helpers for Chatwarden.

- **logger.py**: Centralized logging configuration with coloured console output
  through prompt_toolkit (so log lines do not break the interactive console),
  a rotating per-session log file, and silencing of chatty HTTP client loggers.
"""
