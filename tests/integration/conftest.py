"""Integration test fixtures (live service prerequisites).

Integration tests talk to a real Skill API and are skipped unless
IVK_API_KEY and IVK_MODEL_ID are set.
"""

import pytest

from ivk_skill_sdk import SkillSdk, SkillSettings


@pytest.fixture(scope="session")
def live_settings() -> SkillSettings:
    """Settings from the environment; skips when credentials are missing."""
    settings = SkillSettings()
    if not settings.API_KEY:
        pytest.skip("IVK_API_KEY not set")
    if not settings.MODEL_ID:
        pytest.skip("IVK_MODEL_ID not set")
    return settings


@pytest.fixture
def live_sdk(live_settings):
    sdk = SkillSdk.from_settings(live_settings)
    yield sdk
    sdk.close()
