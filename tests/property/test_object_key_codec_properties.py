"""
Property-based tests for ObjectKeyCodec.

Verifies that encoded names decode back to the same metadata and that
decoding directory listings never raises.
"""

import pytest
from hypothesis import given

from fileshare.domain.file_sharing import ObjectKeyCodec

from .strategies import object_metadata, original_names, storage_names


class TestObjectKeyCodecProperties:

    @given(metadata=object_metadata())
    def test_decode_inverts_encode(self, metadata):
        codec = ObjectKeyCodec()

        assert codec.decode(codec.encode(metadata)) == metadata

    @given(metadata=object_metadata())
    def test_identifier_is_first_segment(self, metadata):
        codec = ObjectKeyCodec()
        name = codec.encode(metadata)

        assert name.split("-", 1)[0] == metadata.identifier
        assert codec.identifier_of(name) == metadata.identifier

    @given(name=storage_names())
    def test_decode_never_raises(self, name):
        decoded = ObjectKeyCodec().decode(name)

        if decoded is not None:
            assert decoded.identifier
            assert decoded.original_name
            assert "-" not in decoded.identifier

    @given(filename=original_names())
    def test_normalized_names_fit_one_path_component(self, filename):
        codec = ObjectKeyCodec()

        normalized = codec.normalize_original_name(filename)

        assert normalized
        assert "/" not in normalized
        assert len(normalized.encode("utf-8")) <= codec.max_name_bytes - 40

    @pytest.mark.parametrize("filename", ["../../etc/passwd", "C:\\temp\\x.txt", "\x00"])
    def test_normalize_strips_paths(self, filename):
        normalized = ObjectKeyCodec().normalize_original_name(filename)

        assert "/" not in normalized
        assert "\\" not in normalized
