"""
Unit tests for the IVK Skill SDK.

Test individual components in isolation:
- Retry policy (classification, backoff schedule, decisions)
- Retry invoker (blocking and async modes, cancellation, retry events)
- Data models (explicit-presence serialization, validation)
- Transport adapter (httpx.MockTransport)
- SkillSdk facade, builder and settings
"""
