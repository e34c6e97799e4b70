import pytest

from accelkit import legacy
from accelkit.legacy import (
    MAX_NUMBER_BUFFERS,
    MAX_OFFSET,
    LegacyPointerMapper,
    get_pointer_mapper,
)


@pytest.fixture
def mapper():
    return LegacyPointerMapper()


def test_first_pointer_has_id_one_and_zero_offset(mapper):
    ptr = mapper.add_pointer(bytearray(8))
    assert mapper.get_buffer_id(ptr) == 1
    assert mapper.get_offset(ptr) == 0
    assert not LegacyPointerMapper.is_nullptr(ptr)


def test_offset_arithmetic_keeps_buffer_id(mapper):
    ptr = mapper.add_pointer(bytearray(64))
    moved = ptr + 10
    assert mapper.get_buffer_id(moved) == mapper.get_buffer_id(ptr)
    assert mapper.get_offset(moved) == 10


def test_is_nullptr_checks_only_id_bits():
    assert LegacyPointerMapper.is_nullptr(0)
    assert LegacyPointerMapper.is_nullptr(None)
    assert LegacyPointerMapper.is_nullptr(MAX_OFFSET)
    assert not LegacyPointerMapper.is_nullptr(MAX_OFFSET + 1)


def test_get_buffer_returns_registered_object(mapper):
    buf = bytearray(b"abc")
    ptr = mapper.add_pointer(buf)
    assert mapper.get_buffer(mapper.get_buffer_id(ptr)) is buf


def test_successive_pointers_have_distinct_ids(mapper):
    ptrs = [mapper.add_pointer(bytearray(4)) for _ in range(5)]
    ids = {mapper.get_buffer_id(p) for p in ptrs}
    assert len(ids) == 5
    assert mapper.count() == 5


def test_remove_pointer_forgets_buffer(mapper):
    a = mapper.add_pointer(bytearray(4))
    b = mapper.add_pointer(bytearray(4))
    mapper.remove_pointer(a + 3)
    assert mapper.count() == 1
    with pytest.raises(KeyError):
        mapper.get_buffer(mapper.get_buffer_id(a))
    assert len(mapper.get_buffer(mapper.get_buffer_id(b))) == 4


def test_remove_unknown_pointer_is_ignored(mapper):
    mapper.add_pointer(bytearray(4))
    mapper.remove_pointer(0)
    assert mapper.count() == 1


def test_get_buffer_unknown_id_raises(mapper):
    with pytest.raises(KeyError):
        mapper.get_buffer(7)


def test_clear_empties_mapper(mapper):
    for _ in range(3):
        mapper.add_pointer(bytearray(2))
    mapper.clear()
    assert mapper.count() == 0


def test_add_pointer_rejects_non_buffer(mapper):
    with pytest.raises(TypeError):
        mapper.add_pointer(42)


def test_null_returned_when_ids_are_exhausted(mapper):
    shared = bytes(1)
    ptrs = [mapper.add_pointer(shared) for _ in range(MAX_NUMBER_BUFFERS + 1)]
    assert not any(LegacyPointerMapper.is_nullptr(p) for p in ptrs)
    assert len({mapper.get_buffer_id(p) for p in ptrs}) == MAX_NUMBER_BUFFERS + 1
    for p in ptrs[32760:32775]:
        assert mapper.get_buffer(mapper.get_buffer_id(p)) is shared
    assert LegacyPointerMapper.is_nullptr(mapper.add_pointer(shared))


def test_singleton_is_shared():
    first = get_pointer_mapper()
    first.clear()
    buf = bytearray(3)
    ptr = first.add_pointer(buf)
    second = get_pointer_mapper()
    assert second.count() == 1
    assert second.get_buffer(second.get_buffer_id(ptr)) is buf
    second.clear()
    assert first.count() == 0


def test_malloc_and_free_use_singleton():
    legacy.clear()
    ptr = legacy.malloc(16)
    mapper = get_pointer_mapper()
    assert mapper.count() == 1
    buf = mapper.get_buffer(mapper.get_buffer_id(ptr))
    assert len(buf) == 16
    assert bytes(buf) == bytes(16)
    legacy.free(ptr)
    assert mapper.count() == 0


def test_clear_releases_all_mallocs():
    legacy.clear()
    legacy.malloc(1)
    legacy.malloc(2)
    assert get_pointer_mapper().count() == 2
    legacy.clear()
    assert get_pointer_mapper().count() == 0


def test_malloc_negative_size_raises():
    with pytest.raises(ValueError):
        legacy.malloc(-1)