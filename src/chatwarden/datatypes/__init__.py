"""Data types shared across the Chatwarden moderation pipeline."""
