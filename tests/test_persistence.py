import asyncio

import pytest

from billboard_pricing.engine.errors import ExternalIOFailure
from billboard_pricing.services.persistence import InMemoryRepository, JsonFileRepository


def test_json_repository_missing_file_loads_none(tmp_path):
    repository = JsonFileRepository(tmp_path / 'pricing.json')
    assert asyncio.run(repository.load()) is None


def test_json_repository_save_then_load(tmp_path, store):
    path = tmp_path / 'nested' / 'pricing.json'
    repository = JsonFileRepository(path)
    document = store.to_document()

    asyncio.run(repository.save(document))

    assert asyncio.run(repository.load()) == document
    # Arabic names are stored readable, not escaped
    assert 'مصراتة' in path.read_text(encoding='utf-8')


def test_json_repository_corrupt_file(tmp_path):
    path = tmp_path / 'pricing.json'
    path.write_text('{not json', encoding='utf-8')
    with pytest.raises(ExternalIOFailure):
        asyncio.run(JsonFileRepository(path).load())


def test_json_repository_unwritable_target(tmp_path):
    # A directory where the file should be
    path = tmp_path / 'pricing.json'
    path.mkdir()
    with pytest.raises(ExternalIOFailure):
        asyncio.run(JsonFileRepository(path).save({'zones': {}}))
    assert not (tmp_path / 'pricing.json.tmp').exists()


def test_json_repository_failed_dump_keeps_previous_document(tmp_path):
    path = tmp_path / 'pricing.json'
    repository = JsonFileRepository(path)
    asyncio.run(repository.save({'zones': {'a': {}}}))

    with pytest.raises(ExternalIOFailure):
        asyncio.run(repository.save({'zones': object()}))

    assert not (tmp_path / 'pricing.json.tmp').exists()
    assert asyncio.run(repository.load()) == {'zones': {'a': {}}}


def test_in_memory_repository_copies_documents():
    repository = InMemoryRepository()
    document = {'zones': {'a': {}}}
    asyncio.run(repository.save(document))
    document['zones'].clear()

    loaded = asyncio.run(repository.load())
    assert loaded == {'zones': {'a': {}}}
    loaded['zones'].clear()
    assert repository.document == {'zones': {'a': {}}}
    assert repository.save_count == 1
