"""
Batched chat moderation for Chatwarden.

- **batch_accumulator.py**: Thread-safe pending queue with a size-triggered
  sweep into immutable BatchJobs.
- **oracle_payload.py**: Builds the numbered batch prompt and parses the
  comma separated ``ok``/``bad`` reply positionally.
- **oracle_client.py**: AsyncOpenAI adapter that classifies one batch per call
  and fails open on any error or timeout.
- **mute_store.py**: Per-actor mute expiry with lazy eviction on read.
- **scan_quota.py**: Daily budget on oracle scans.
- **verdict_applier.py**: Single consumer that mutes and notifies actors.
- **moderation_pipeline.py**: Ingress guards, batching, worker pool and lifecycle.
"""
