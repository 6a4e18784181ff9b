"""Tests for the profile service."""

from uuid import UUID, uuid4

import pytest

from baby_tracker.domain.models import Profile
from baby_tracker.services.profiles import (
    ProfileService,
    is_valid_timezone,
    photo_path,
    profile_zone,
)
from tests.conftest import InMemoryPhotoStorage, InMemoryProfileRepository


def _profile(user_id: UUID, timezone: str = "UTC") -> Profile:
    return Profile(
        id=user_id,
        email="parents@example.com",
        father_name="Ali",
        mother_name="",
        baby_name="Nika",
        profile_pic_url=None,
        timezone=timezone,
    )


def test_update_profile_saves_changes() -> None:
    user_id = uuid4()
    repository = InMemoryProfileRepository(profiles={user_id: _profile(user_id)})
    service = ProfileService(repository, InMemoryPhotoStorage())

    updated = service.update_profile(
        user_id,
        {"mother_name": "Sara", "timezone": "Asia/Tehran", "profile_pic_url": ""},
    )

    assert updated.mother_name == "Sara"
    assert updated.timezone == "Asia/Tehran"
    assert updated.profile_pic_url is None


def test_update_profile_rejects_bad_input() -> None:
    user_id = uuid4()
    repository = InMemoryProfileRepository(profiles={user_id: _profile(user_id)})
    service = ProfileService(repository, InMemoryPhotoStorage())

    with pytest.raises(ValueError, match="Unknown timezone"):
        service.update_profile(user_id, {"timezone": "Mars/Olympus"})
    with pytest.raises(ValueError, match="Unknown profile fields"):
        service.update_profile(user_id, {"email": "other@example.com"})


def test_upload_photo_returns_public_url_without_saving() -> None:
    user_id = uuid4()
    repository = InMemoryProfileRepository(profiles={user_id: _profile(user_id)})
    storage = InMemoryPhotoStorage()
    service = ProfileService(repository, storage)

    url = service.upload_photo(user_id, "baby.png", b"png-bytes", "image/png")

    assert url.endswith(f"profiles/{user_id}.png")
    assert storage.files[f"profiles/{user_id}.png"] == (b"png-bytes", "image/png")
    assert repository.profiles[user_id].profile_pic_url is None


def test_photo_path_defaults_extension() -> None:
    user_id = uuid4()

    assert photo_path(user_id, "IMG_0001.JPEG") == f"profiles/{user_id}.JPEG"
    assert photo_path(user_id, "camera") == f"profiles/{user_id}.jpg"
    assert photo_path(user_id, "trailing.") == f"profiles/{user_id}.jpg"


def test_timezone_helpers() -> None:
    user_id = uuid4()

    assert is_valid_timezone("America/Los_Angeles")
    assert not is_valid_timezone("Not/AZone")
    assert profile_zone(_profile(user_id, "Asia/Tehran")).key == "Asia/Tehran"
    assert profile_zone(_profile(user_id, "bogus"), "UTC").key == "UTC"
    assert profile_zone(None, "Europe/Berlin").key == "Europe/Berlin"
