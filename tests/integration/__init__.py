"""
Integration tests for the IVK Skill SDK.

Round trips against a live Skill API. Skipped unless IVK_API_KEY and
IVK_MODEL_ID are set.
"""
