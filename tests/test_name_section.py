"""Tests for name subsections and their framing."""

import os
from io import BytesIO

import pytest

from wasm_names_py import (
    FormatError, FunctionNameSection, IndexMap, InvalidUtf8Error, LocalNameSection,
    MalformedVarintError, ModuleNameSection, NameMap, NameSection, NameType,
    PayloadTooLargeError, TrailingBytesError, TruncatedInputError,
    read_name_section, read_name_sections, write_name_section, write_name_sections
)
from wasm_names_py.io.binary_stream import BinaryStream


MODULE_BYTES = b'\x00\x07\x06my_mod'
FUNCTION_BYTES = b'\x01\x0e\x01\x00\x0bhello_world'
LOCAL_BYTES = b'\x02\x08\x01\x00\x01\x00\x03msg'
UNPARSED_BYTES = b'\x78\x03\x00\x01\x02'


def serialize_and_deserialize(original: NameSection) -> bytes:
    """Serialize a section, deserialize it, and check it matches the original."""
    stream = BinaryStream()
    write_name_section(stream, original)
    data = stream.get_data()
    deserialized = read_name_section(BinaryStream(data))
    assert deserialized == original
    return data


def hello_world_functions() -> FunctionNameSection:
    section = FunctionNameSection()
    section.names.insert(0, "hello_world")
    return section


def msg_locals() -> LocalNameSection:
    section = LocalNameSection()
    locals_ = NameMap()
    locals_.insert(0, "msg")
    section.local_names.insert(0, locals_)
    return section


class TestRoundTrip:

    def test_module_name(self):
        data = serialize_and_deserialize(NameSection.module(ModuleNameSection("my_mod")))
        assert data[0] == NameType.MODULE
        assert data == MODULE_BYTES

    def test_function_names(self):
        data = serialize_and_deserialize(NameSection.function(hello_world_functions()))
        assert data == FUNCTION_BYTES
        decoded = NameSection.from_bytes(data)
        assert dict(decoded.function_names.names) == {0: "hello_world"}

    def test_local_names(self):
        data = serialize_and_deserialize(NameSection.local(msg_locals()))
        assert data == LOCAL_BYTES
        decoded = NameSection.from_bytes(data).local_names.local_names
        assert list(decoded) == [0]
        assert dict(decoded[0]) == {0: "msg"}

    def test_unparsed(self):
        # A made-up name section type which is unlikely to be allocated soon.
        section = NameSection.unparsed(120, bytes([0, 1, 2]))
        assert serialize_and_deserialize(section) == UNPARSED_BYTES

    def test_empty_and_unicode_module_names(self):
        serialize_and_deserialize(NameSection.module(""))
        serialize_and_deserialize(NameSection.module("módulo_✓"))

    def test_empty_function_names(self):
        section = NameSection.function()
        data = section.to_bytes()
        assert data == b'\x01\x01\x00'
        assert len(NameSection.from_bytes(data).function_names.names) == 0

    def test_empty_local_names(self):
        assert serialize_and_deserialize(NameSection.local()) == b'\x02\x01\x00'

    def test_sparse_indices(self):
        section = FunctionNameSection({1000: "late", 3: "early"})
        serialize_and_deserialize(NameSection.function(section))


class TestUnparsed:

    def test_tag_fidelity(self):
        section = NameSection.from_bytes(UNPARSED_BYTES)
        assert section.is_unparsed
        assert section.name_type == 120
        assert section.name_payload == b'\x00\x01\x02'
        assert section.to_bytes() == UNPARSED_BYTES

    def test_newer_standard_subsections_pass_through(self):
        # Type 4 (type names) from the extended name section proposal
        data = b'\x04\x05\x01\x00\x02ab'
        section = NameSection.from_bytes(data)
        assert section.kind == "unparsed"
        assert section.to_bytes() == data

    def test_empty_payload(self):
        section = NameSection.from_bytes(b'\x7f\x00')
        assert section.name_payload == b''


class TestOrdering:

    def test_function_names_sorted_on_encode(self):
        section = FunctionNameSection()
        section.names[5] = "five"
        section.names[0] = "zero"
        payload = NameSection.function(section).to_bytes()[2:]
        assert payload == b'\x02\x00\x04zero\x05\x04five'

    def test_local_names_sorted_on_encode(self):
        section = LocalNameSection()
        section.local_names[9] = IndexMap({1: "b", 0: "a"})
        section.local_names[2] = IndexMap({7: "c"})
        payload = NameSection.local(section).to_bytes()[2:]
        assert payload == (
            b'\x02'
            b'\x02\x01\x07\x01c'
            b'\x09\x02\x00\x01a\x01\x01b'
        )

    def test_duplicate_index_overwrites(self):
        section = FunctionNameSection()
        section.names[1] = "old"
        section.names[1] = "new"
        payload = NameSection.function(section).to_bytes()[2:]
        assert payload == b'\x01\x01\x03new'


class TestDecodeErrors:

    def test_truncated_known_payload(self):
        with pytest.raises(TruncatedInputError):
            NameSection.from_bytes(b'\x00\x10\x06my_mod')

    def test_truncated_unparsed_payload(self):
        with pytest.raises(TruncatedInputError):
            NameSection.from_bytes(b'\x78\x05\x00\x01')

    def test_declared_length_too_short(self):
        with pytest.raises(TruncatedInputError):
            NameSection.from_bytes(b'\x00\x03\x06my_mod')

    def test_leftover_payload_bytes(self):
        with pytest.raises(TrailingBytesError):
            NameSection.from_bytes(b'\x00\x08\x06my_modX')

    def test_bytes_after_subsection(self):
        with pytest.raises(TrailingBytesError):
            NameSection.from_bytes(b'\x78\x00\x00')

    def test_tag_high_bit(self):
        with pytest.raises(MalformedVarintError):
            NameSection.from_bytes(b'\x80\x00')

    def test_invalid_utf8_name(self):
        with pytest.raises(InvalidUtf8Error):
            NameSection.from_bytes(b'\x00\x02\x01\xff')

    def test_payload_limit(self):
        with pytest.raises(PayloadTooLargeError):
            NameSection.from_bytes(UNPARSED_BYTES, max_payload_len=2)
        assert NameSection.from_bytes(UNPARSED_BYTES, max_payload_len=3).name_payload == b'\x00\x01\x02'

    def test_all_errors_are_format_errors(self):
        for data in (b'\x00\x10\x06my_mod', b'\x80\x00', b'\x00\x08\x06my_modX'):
            with pytest.raises(FormatError):
                NameSection.from_bytes(data)


class TestNonStrict:

    def test_declared_length_not_checked(self):
        stream = BinaryStream(b'\x00\x08\x06my_modX')
        section = NameSection.read(stream, strict=False)
        assert section == NameSection.module("my_mod")
        assert stream.remaining == 1

    def test_unparsed_still_bounded(self):
        with pytest.raises(TruncatedInputError):
            NameSection.read(BinaryStream(b'\x78\x05\x00'), strict=False)


class TestConstruction:

    def test_module_name_from_bytes(self):
        assert ModuleNameSection(b'caf\xc3\xa9').name == 'café'
        assert NameSection.module(b'm') == NameSection.module(ModuleNameSection('m'))

    def test_module_name_rejects_non_strings(self):
        with pytest.raises(TypeError):
            ModuleNameSection(5)

    def test_unencodable_names_rejected(self):
        with pytest.raises(ValueError):
            ModuleNameSection("\ud800")
        with pytest.raises(ValueError):
            FunctionNameSection({0: "ok", 1: "\udfff"})
        with pytest.raises(ValueError):
            LocalNameSection({0: {0: "\ud800"}})

    def test_non_string_names_rejected(self):
        with pytest.raises(TypeError):
            FunctionNameSection({0: 5})
        with pytest.raises(TypeError):
            LocalNameSection({0: {0: b"msg"}})

    def test_payload_must_match_tag(self):
        with pytest.raises(ValueError):
            NameSection(NameType.MODULE, b'\x00')
        with pytest.raises(ValueError):
            NameSection(NameType.FUNCTION, ModuleNameSection('x'))
        with pytest.raises(ValueError):
            NameSection(120, ModuleNameSection('x'))

    def test_unparsed_rejects_known_tags(self):
        with pytest.raises(ValueError):
            NameSection.unparsed(1, b'')

    def test_tag_range(self):
        with pytest.raises(ValueError):
            NameSection(128, b'')
        with pytest.raises(ValueError):
            NameSection(-1, b'')

    def test_bytearray_payload(self):
        section = NameSection.unparsed(99, bytearray(b'\x01'))
        assert section.name_payload == b'\x01'

    def test_accessors(self):
        section = NameSection.function(hello_world_functions())
        assert section.kind == "function"
        assert section.module_name is None
        assert section.local_names is None
        assert section.name_payload is None
        assert section.function_names.names[0] == "hello_world"

    def test_mutable_payload(self):
        section = NameSection.module("before")
        section.module_name.name = "after"
        assert NameSection.from_bytes(section.to_bytes()).module_name.name == "after"

    def test_plain_dicts_become_index_maps(self):
        section = LocalNameSection({3: {1: "b", 0: "a"}})
        assert isinstance(section.local_names, IndexMap)
        assert isinstance(section.local_names[3], IndexMap)
        assert isinstance(FunctionNameSection({0: "f"}).names, IndexMap)


class TestSectionSequence:

    def test_read_all_subsections(self):
        data = MODULE_BYTES + FUNCTION_BYTES + LOCAL_BYTES + UNPARSED_BYTES
        sections = read_name_sections(data)
        assert [s.kind for s in sections] == ["module", "function", "local", "unparsed"]
        assert write_name_sections(sections) == data

    def test_order_and_duplicates_preserved(self):
        data = FUNCTION_BYTES + MODULE_BYTES + MODULE_BYTES
        sections = read_name_sections(data)
        assert [s.name_type for s in sections] == [1, 0, 0]
        assert write_name_sections(sections) == data

    def test_empty(self):
        assert read_name_sections(b'') == []
        assert write_name_sections([]) == b''

    def test_truncated_last_subsection(self):
        with pytest.raises(TruncatedInputError):
            read_name_sections(MODULE_BYTES + FUNCTION_BYTES[:-1])

    def test_from_file_like(self):
        stream = BinaryStream(BytesIO(MODULE_BYTES + LOCAL_BYTES))
        assert len(read_name_sections(stream)) == 2

    def test_from_pipe(self):
        data = MODULE_BYTES + FUNCTION_BYTES + LOCAL_BYTES + UNPARSED_BYTES
        read_fd, write_fd = os.pipe()
        with os.fdopen(write_fd, 'wb') as writer:
            writer.write(data)
        with os.fdopen(read_fd, 'rb', buffering=0) as reader:
            sections = read_name_sections(BinaryStream(reader))
        assert [s.kind for s in sections] == ["module", "function", "local", "unparsed"]
        assert write_name_sections(sections) == data

    def test_tag_high_bit_in_sequence(self):
        with pytest.raises(MalformedVarintError):
            read_name_sections(MODULE_BYTES + b'\x80\x00')
