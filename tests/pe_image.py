"""Builds small PE32 images with a hand-made debug directory."""

from __future__ import annotations

import struct

IMAGE_BASE = 0x400000
SECTION_ALIGNMENT = 0x1000
FILE_ALIGNMENT = 0x200
SECTION_RVA = 0x1000
SECTION_OFFSET = 0x200
DEBUG_ENTRY_SIZE = 28

IMAGE_DEBUG_TYPE_COFF = 1
IMAGE_DEBUG_TYPE_CODEVIEW = 2

EXAMPLE_SIGNATURE = bytes.fromhex("DEADBEEF0102030405060708090A0B0C")

OPTIONAL_HEADER_FORMAT = "<HBB" + "I" * 9 + "H" * 6 + "I" * 4 + "HH" + "I" * 6


def _align(value: int, alignment: int) -> int:
    return (value + alignment - 1) // alignment * alignment


def rsds_record(signature: bytes = EXAMPLE_SIGNATURE, file_name: bytes = b"example.pdb\0", age: int = 1) -> bytes:
    return b"RSDS" + signature + struct.pack("<I", age) + file_name


def build_pe(debug_entries=()) -> bytes:
    """Return a PE32 image whose only section holds the given debug entries.

    ``debug_entries`` is a sequence of ``(type, payload)`` pairs. With no
    entries the debug data directory is left empty.
    """
    table_size = DEBUG_ENTRY_SIZE * len(debug_entries)
    table = b""
    payloads = b""
    for debug_type, payload in debug_entries:
        offset = table_size + len(payloads)
        table += struct.pack(
            "<IIHHIIII",
            0,
            0,
            0,
            0,
            debug_type,
            len(payload),
            SECTION_RVA + offset,
            SECTION_OFFSET + offset,
        )
        payloads += payload + b"\0" * (-len(payload) % 4)

    section = table + payloads
    raw_size = max(FILE_ALIGNMENT, _align(len(section), FILE_ALIGNMENT))
    section += b"\0" * (raw_size - len(section))
    size_of_image = SECTION_RVA + _align(raw_size, SECTION_ALIGNMENT)

    dos_header = b"MZ" + b"\0" * 58 + struct.pack("<I", 0x40)
    file_header = struct.pack("<HHIIIHH", 0x14C, 1, 0, 0, 0, 0xE0, 0x2102)
    optional_header = struct.pack(
        OPTIONAL_HEADER_FORMAT,
        0x10B, 14, 0,
        raw_size, raw_size, 0, 0, SECTION_RVA, SECTION_RVA, IMAGE_BASE, SECTION_ALIGNMENT, FILE_ALIGNMENT,
        6, 0, 0, 0, 6, 0,
        0, size_of_image, FILE_ALIGNMENT, 0,
        2, 0,
        0x100000, 0x1000, 0x100000, 0x1000, 0, 16,
    )

    directories = [(0, 0)] * 16
    if debug_entries:
        directories[6] = (SECTION_RVA, table_size)
    data_directories = b"".join(struct.pack("<II", rva, size) for rva, size in directories)

    section_header = struct.pack(
        "<8sIIIIIIHHI",
        b".rdata",
        raw_size,
        SECTION_RVA,
        raw_size,
        SECTION_OFFSET,
        0,
        0,
        0,
        0,
        0x40000040,
    )

    headers = dos_header + b"PE\0\0" + file_header + optional_header + data_directories + section_header
    headers += b"\0" * (SECTION_OFFSET - len(headers))
    return headers + section
