from datetime import datetime
from unittest.mock import call

from src.repositories import RepositoryError
from src.services import CleanupService


def make_service(file_repository, user_file_repository, batch_size=50):
    return CleanupService(file_repository, user_file_repository, batch_size=batch_size)


def expired_files(sample_file, count):
    return [sample_file.model_copy(update={"slug": f"slug{i:04d}"}) for i in range(count)]


async def test_cleanup_removes_expired_files(file_repository, user_file_repository, sample_file):
    second = sample_file.model_copy(update={"slug": "ZyXwVu98"})
    file_repository.find_expired.return_value = [sample_file, second]
    now = datetime(2026, 6, 1)

    removed = await make_service(file_repository, user_file_repository).cleanup_expired(now)

    assert removed == 2
    file_repository.find_expired.assert_awaited_once_with(now, limit=50, exclude_slugs=[])
    assert file_repository.delete_by_slug.await_args_list == [call("AbCdEf12"), call("ZyXwVu98")]
    assert user_file_repository.delete_by_slug.await_args_list == [call("AbCdEf12"), call("ZyXwVu98")]


async def test_cleanup_nothing_expired(file_repository, user_file_repository):
    file_repository.find_expired.return_value = []

    assert await make_service(file_repository, user_file_repository).cleanup_expired() == 0
    file_repository.delete_by_slug.assert_not_awaited()


async def test_cleanup_drains_every_batch(file_repository, user_file_repository, sample_file):
    files = expired_files(sample_file, 120)
    file_repository.find_expired.side_effect = [files[:50], files[50:100], files[100:]]

    removed = await make_service(file_repository, user_file_repository).cleanup_expired()

    assert removed == 120
    assert file_repository.find_expired.await_count == 3
    assert file_repository.delete_by_slug.await_count == 120


async def test_cleanup_stops_on_empty_batch(file_repository, user_file_repository, sample_file):
    files = expired_files(sample_file, 100)
    file_repository.find_expired.side_effect = [files[:50], files[50:], []]

    removed = await make_service(file_repository, user_file_repository).cleanup_expired()

    assert removed == 100
    assert file_repository.find_expired.await_count == 3


async def test_cleanup_continues_after_failure(file_repository, user_file_repository, sample_file):
    second = sample_file.model_copy(update={"slug": "ZyXwVu98"})
    file_repository.find_expired.return_value = [sample_file, second]
    user_file_repository.delete_by_slug.side_effect = [RepositoryError("connection reset"), 1]

    removed = await make_service(file_repository, user_file_repository).cleanup_expired()

    assert removed == 1
    # The file row of the failed slug stays so a later run can retry it
    file_repository.delete_by_slug.assert_awaited_once_with("ZyXwVu98")


async def test_cleanup_skips_failed_slugs_in_later_batches(file_repository, user_file_repository, sample_file):
    files = expired_files(sample_file, 3)
    file_repository.find_expired.side_effect = [files[:2], files[2:]]
    user_file_repository.delete_by_slug.side_effect = [RepositoryError("connection reset"), 1, 1]

    removed = await make_service(file_repository, user_file_repository, batch_size=2).cleanup_expired()

    assert removed == 2
    assert file_repository.find_expired.await_args_list[1].kwargs["exclude_slugs"] == ["slug0000"]
