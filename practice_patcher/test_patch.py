"""
Tests for the patch engine: descriptor verify-then-overwrite rules,
fail-fast groups, nesting, state inspection and overlap detection.

Run: python -m pytest practice_patcher/test_patch.py
"""
import pytest

from practice_patcher.errors import (
    AlreadyPatchedError,
    AlreadyUnpatchedError,
    BinaryModifiedError,
    ReadFailError,
)
from practice_patcher.patch import (
    CompositePatch,
    PatchDescriptor,
    PatchState,
    find_overlaps,
)

BEEF_TO_FACE = PatchDescriptor(0x02, b"\xbe\xef", b"\xfa\xce", name="beef_to_face")


def make_buffer():
    return bytearray(b"\xde\xad\xbe\xef")


def test_patch_then_unpatch_restores_original():
    buf = make_buffer()
    BEEF_TO_FACE.patch(buf)
    assert buf == bytearray(b"\xde\xad\xfa\xce")

    BEEF_TO_FACE.unpatch(buf)
    assert buf == bytearray(b"\xde\xad\xbe\xef")


def test_second_patch_reports_already_patched_without_writing():
    buf = make_buffer()
    BEEF_TO_FACE.patch(buf)

    with pytest.raises(AlreadyPatchedError) as excinfo:
        BEEF_TO_FACE.patch(buf)

    assert excinfo.value.descriptor is BEEF_TO_FACE
    assert buf == bytearray(b"\xde\xad\xfa\xce")


def test_unpatch_on_original_reports_already_unpatched():
    buf = make_buffer()
    with pytest.raises(AlreadyUnpatchedError):
        BEEF_TO_FACE.unpatch(buf)
    assert buf == make_buffer()


@pytest.mark.parametrize("method", ["patch", "unpatch"])
def test_foreign_bytes_report_binary_modified(method):
    buf = bytearray(b"\xde\xad\x00\x01")
    with pytest.raises(BinaryModifiedError):
        getattr(BEEF_TO_FACE, method)(buf)
    assert buf == bytearray(b"\xde\xad\x00\x01")


def test_region_past_end_reports_read_fail():
    buf = bytearray(b"\xde\xad\xbe")
    with pytest.raises(ReadFailError):
        BEEF_TO_FACE.patch(buf)
    assert buf == bytearray(b"\xde\xad\xbe")


def test_unpatch_bounds_use_after_length():
    # before fits, after does not
    descriptor = PatchDescriptor(1, b"\xaa", b"\xbb\xcc\xdd")
    buf = bytearray(b"\x00\xaa\x00")
    with pytest.raises(ReadFailError):
        descriptor.unpatch(buf)
    assert buf == bytearray(b"\x00\xaa\x00")


def test_noop_descriptor_always_patches():
    descriptor = PatchDescriptor(0, b"\x90", b"\x90")
    buf = bytearray(b"\x90")
    descriptor.patch(buf)
    descriptor.patch(buf)
    assert buf == bytearray(b"\x90")


def test_different_lengths_size_the_region_per_direction():
    descriptor = PatchDescriptor(1, b"\x01\x02", b"\x03\x04\x05")
    buf = bytearray(b"\x00\x01\x02\x09")
    descriptor.patch(buf)
    assert buf == bytearray(b"\x00\x03\x04\x05\x09")

    descriptor.unpatch(buf)
    assert buf == bytearray(b"\x00\x01\x02\x09")


def test_descriptor_rejects_negative_location():
    with pytest.raises(ValueError):
        PatchDescriptor(-1, b"\x00", b"\x01")


def test_descriptor_stores_immutable_bytes():
    descriptor = PatchDescriptor(0, bytearray(b"\x01"), [0x02])
    assert isinstance(descriptor.before, bytes)
    assert descriptor.after == b"\x02"
    with pytest.raises(AttributeError):
        descriptor.location = 5


def test_group_stops_at_first_failure():
    first = PatchDescriptor(0, b"\xff", b"\x00")
    second = PatchDescriptor(1, b"\xbb", b"\xcc")
    group = CompositePatch.of(first, second)
    buf = bytearray(b"\xaa\xbb")

    with pytest.raises(BinaryModifiedError) as excinfo:
        group.patch(buf)

    assert excinfo.value.descriptor is first
    assert buf[1] == 0xBB


def test_group_keeps_earlier_members_applied_after_failure():
    first = PatchDescriptor(0, b"\xaa", b"\x11")
    second = PatchDescriptor(1, b"\xff", b"\x22")
    buf = bytearray(b"\xaa\xbb")

    with pytest.raises(BinaryModifiedError):
        CompositePatch.of(first, second).patch(buf)

    assert buf == bytearray(b"\x11\xbb")


def test_group_unpatch_runs_in_declared_order():
    calls = []

    class Recorder(PatchDescriptor):
        def unpatch(self, buf):
            calls.append(self.name)

    group = CompositePatch.of(Recorder(0, b"", b"", name="a"), Recorder(0, b"", b"", name="b"))
    group.unpatch(bytearray())
    assert calls == ["a", "b"]


def test_nested_group_matches_flat_group():
    d1 = PatchDescriptor(0, b"\x01", b"\x11")
    d2 = PatchDescriptor(1, b"\x02", b"\x22")
    d3 = PatchDescriptor(2, b"\x03", b"\x33")
    nested = CompositePatch.of(CompositePatch.of(d1, d2), d3)
    flat = CompositePatch.of(d1, d2, d3)

    nested_buf = bytearray(b"\x01\x02\x03")
    flat_buf = bytearray(b"\x01\x02\x03")
    nested.patch(nested_buf)
    flat.patch(flat_buf)
    assert nested_buf == flat_buf == bytearray(b"\x11\x22\x33")

    nested.unpatch(nested_buf)
    flat.unpatch(flat_buf)
    assert nested_buf == flat_buf == bytearray(b"\x01\x02\x03")

    assert list(nested.descriptors()) == [d1, d2, d3]


def test_nested_failure_aborts_whole_tree():
    d1 = PatchDescriptor(0, b"\x01", b"\x11")
    broken = PatchDescriptor(1, b"\x7f", b"\x22")
    d3 = PatchDescriptor(2, b"\x03", b"\x33")
    tree = CompositePatch.of(CompositePatch.of(d1, broken), d3)
    buf = bytearray(b"\x01\x02\x03")

    with pytest.raises(BinaryModifiedError):
        tree.patch(buf)
    assert buf[2] == 0x03


def test_group_rejects_unknown_members():
    with pytest.raises(TypeError):
        CompositePatch.of("not a patch")


def test_descriptor_state():
    assert BEEF_TO_FACE.state(make_buffer()) is PatchState.UNPATCHED
    assert BEEF_TO_FACE.state(b"\xde\xad\xfa\xce") is PatchState.PATCHED
    assert BEEF_TO_FACE.state(b"\xde\xad\x00\x00") is PatchState.MODIFIED
    assert BEEF_TO_FACE.state(b"\xde") is PatchState.OUT_OF_BOUNDS


def test_group_state_aggregates_leaves():
    d1 = PatchDescriptor(0, b"\x01", b"\x11")
    d2 = PatchDescriptor(1, b"\x02", b"\x22")
    group = CompositePatch.of(d1, d2)

    assert group.state(b"\x01\x02") is PatchState.UNPATCHED
    assert group.state(b"\x11\x22") is PatchState.PATCHED
    assert group.state(b"\x11\x02") is PatchState.MIXED
    assert group.state(b"\x11\x99") is PatchState.MODIFIED
    assert group.state(b"\x11") is PatchState.OUT_OF_BOUNDS
    assert CompositePatch().state(b"") is PatchState.UNPATCHED


def test_find_overlaps_reports_intersecting_pairs():
    a = PatchDescriptor(0x10, b"\x00\x00\x00\x00", b"\x01\x01\x01\x01", name="a")
    b = PatchDescriptor(0x12, b"\x00", b"\x01", name="b")
    c = PatchDescriptor(0x14, b"\x00\x00", b"\x01\x01", name="c")
    tree = CompositePatch.of(c, CompositePatch.of(b, a))

    assert find_overlaps(tree) == [(a, b)]


def test_find_overlaps_uses_widest_form():
    a = PatchDescriptor(0, b"\x00", b"\x01\x02\x03", name="a")
    b = PatchDescriptor(2, b"\x00", b"\x01", name="b")
    assert find_overlaps(CompositePatch.of(a, b)) == [(a, b)]
    assert find_overlaps(BEEF_TO_FACE) == []
