"""
Configuration management for Chatwarden.

- **app_configuration.py**: YAML configuration loader guarded by fcntl locks.
  Falls back gracefully on missing or malformed config files.
- **ai_settings.py**: Oracle settings (API key, base URL, model, timeout,
  worker count, reply budget per verdict).
- **moderation_settings.py**: Pipeline settings (batch size, message length
  limit, mute duration, forbidden prefix, delete flag, daily scan budget).
"""
