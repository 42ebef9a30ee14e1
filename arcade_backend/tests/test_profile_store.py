"""
Profile Store and Achievement Tests
"""
import pytest

from arcade_backend.errors import InvalidInputError
from arcade_backend.stores.profile_store import (
    ACHIEVEMENTS,
    InMemoryProfileStore,
    MAX_BIO_LENGTH,
    MAX_DISPLAY_NAME_LENGTH,
    unlocked_achievements,
)


@pytest.fixture
def profiles():
    return InMemoryProfileStore()


class TestAchievements:

    def test_thresholds(self):
        assert [a.threshold for a in ACHIEVEMENTS] == [50, 100, 150, 200, 250]

    def test_nothing_unlocked_below_first_threshold(self):
        assert unlocked_achievements(0) == []
        assert unlocked_achievements(49) == []

    def test_threshold_is_inclusive(self):
        assert [a.name for a in unlocked_achievements(100)] == ["Rookie Crosser", "Bold Adventurer"]

    def test_all_unlocked(self):
        assert len(unlocked_achievements(1000)) == len(ACHIEVEMENTS)


class TestProfiles:

    @pytest.mark.asyncio
    async def test_put_and_get(self, profiles):
        saved = await profiles.put("0xAA", "runner", "bio text")
        assert await profiles.get("0xAA") == saved
        assert await profiles.get("0xBB") is None

    @pytest.mark.asyncio
    async def test_blank_fields_are_cleared(self, profiles):
        saved = await profiles.put("0xAA", "   ", "")
        assert saved.display_name is None
        assert saved.bio is None

    @pytest.mark.asyncio
    async def test_display_name_too_long(self, profiles):
        with pytest.raises(InvalidInputError) as exc_info:
            await profiles.put("0xAA", "x" * (MAX_DISPLAY_NAME_LENGTH + 1), None)
        assert exc_info.value.details == {"field": "display_name"}
        assert await profiles.get("0xAA") is None

    @pytest.mark.asyncio
    async def test_bio_too_long(self, profiles):
        with pytest.raises(InvalidInputError):
            await profiles.put("0xAA", None, "x" * (MAX_BIO_LENGTH + 1))

    @pytest.mark.asyncio
    async def test_empty_participant_rejected(self, profiles):
        with pytest.raises(InvalidInputError):
            await profiles.put("", "runner", None)

    @pytest.mark.asyncio
    async def test_display_names_only_for_named(self, profiles):
        await profiles.put("0xAA", "alpha", None)
        await profiles.put("0xBB", None, None)
        assert await profiles.display_names(["0xAA", "0xBB", "0xCC"]) == {"0xAA": "alpha"}
