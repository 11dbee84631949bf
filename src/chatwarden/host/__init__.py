"""
Chat host integration.

- **chat_host.py**: The ``ChatHost`` protocol the pipeline talks to.
- **console_host.py**: Interactive prompt_toolkit host for running the
  pipeline locally: each ``name: text`` line is a chat message.
"""
