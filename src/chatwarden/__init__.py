"""
Chatwarden - Batched LLM Chat Moderation

Chatwarden screens a live stream of short chat messages, batches them, asks an
OpenAI-compatible language model to judge each one, and temporarily mutes the
actors whose messages were judged abusive, all without blocking the thread
that delivered the message.

Core Components:

- **Ingress guards**: Synchronous checks for muted actors, over-long messages
  and prompt-injection prefixes, with a cancel signal for the host
- **Batching**: Thread-safe accumulator that sweeps a fixed-order batch once
  the configured size is reached
- **Oracle client**: One chat completion per batch, one ``ok``/``bad`` verdict
  per message, failing open on any error
- **Mutes**: In-memory, time-bounded mutes that expire lazily on read
- **Console host**: Interactive terminal chat for running the pipeline locally

Usage:
    from chatwarden.main import main
    main()
"""
