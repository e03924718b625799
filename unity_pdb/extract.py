import logging
import struct
from dataclasses import dataclass
from pathlib import PureWindowsPath

import pefile

from .errors import (
    MalformedContainerError,
    MalformedDebugRecordError,
    MissingDebugDirectoryError,
    MissingDebugInfoError,
    ModuleReadError,
)

log = logging.getLogger(__name__)

IMAGE_DEBUG_TYPE_CODEVIEW = pefile.DEBUG_TYPE['IMAGE_DEBUG_TYPE_CODEVIEW']
CV_SIGNATURE_RSDS = b'RSDS'
SIGNATURE_SIZE = 16


@dataclass(frozen=True)
class ModuleIdentity:
    """What the debug record says about the symbol file a module was built with."""

    module_base_name: str
    record_signature: str
    symbol_file_base_name: str
    symbol_file_name: str = ''
    record_age: int = 0


def format_signature(raw: bytes) -> str:
    """Render a 16-byte GUID the way symbol servers address it.

    The first three groups are little-endian integers (4, 2 and 2 bytes),
    the last 8 bytes are kept in their original order.
    """
    if len(raw) < SIGNATURE_SIZE:
        raise MalformedDebugRecordError(
            f'signature needs {SIGNATURE_SIZE} bytes, got {len(raw)}')

    data1, data2, data3 = struct.unpack_from('<IHH', raw)
    return '{:08X}{:04X}{:04X}{}'.format(
            data1,
            data2,
            data3,
            raw[8:SIGNATURE_SIZE].hex().upper())


def _signature_bytes(record) -> bytes:
    # pefile splits the GUID into Data1..Data6, put it back together.
    return struct.pack(
            '<IHHBB',
            record.Signature_Data1,
            record.Signature_Data2,
            record.Signature_Data3,
            record.Signature_Data4,
            record.Signature_Data5) + bytes(record.Signature_Data6)


def _symbol_file_name(raw_name: bytes) -> str:
    name = raw_name.decode('utf-8', errors='replace')

    # The name ends at the first null-byte, padding included.
    name = name.split('\0', 1)[0].rstrip()

    # PureWindowsPath accepts both \ and / as separators on every host.
    file_name = PureWindowsPath(name).name
    if file_name in ('', '.', '..'):
        raise MalformedDebugRecordError(
            f'no file name in debug record path {name!r}')
    return file_name


def _load_pe(module_data: bytes) -> pefile.PE:
    try:
        pe = pefile.PE(data=module_data, fast_load=True)
        pe.parse_data_directories(
            directories=[pefile.DIRECTORY_ENTRY['IMAGE_DIRECTORY_ENTRY_DEBUG']])
    except pefile.PEFormatError as e:
        raise MalformedContainerError(f'not a valid PE module: {e}') from e
    return pe


def _find_rsds_record(pe: pefile.PE, module_data: bytes):
    debug_entries = getattr(pe, 'DIRECTORY_ENTRY_DEBUG', None)
    if not debug_entries:
        raise MissingDebugDirectoryError('module has no debug directory')

    truncated = False
    for debug_entry in debug_entries:
        if debug_entry.struct.Type != IMAGE_DEBUG_TYPE_CODEVIEW:
            continue

        record = debug_entry.entry
        if record is not None and getattr(record, 'CvSignature', None) == CV_SIGNATURE_RSDS:
            return record

        # pefile drops RSDS records that are too short to unpack.
        offset = debug_entry.struct.PointerToRawData
        if record is None and module_data[offset:offset + 4] == CV_SIGNATURE_RSDS:
            truncated = True

    if truncated:
        raise MalformedDebugRecordError('RSDS debug record is truncated')
    raise MissingDebugInfoError('debug directory has no RSDS CodeView record')


def extract_module_identity(module_data: bytes) -> ModuleIdentity:
    pe = _load_pe(module_data)
    record = _find_rsds_record(pe, module_data)

    symbol_file_name = _symbol_file_name(getattr(record, 'PdbFileName', b''))
    stem = PureWindowsPath(symbol_file_name).stem
    signature = format_signature(_signature_bytes(record))

    log.debug('RSDS record: file=%s signature=%s age=%d',
              symbol_file_name, signature, record.Age)

    return ModuleIdentity(
            module_base_name=stem,
            record_signature=signature,
            symbol_file_base_name=stem,
            symbol_file_name=symbol_file_name,
            record_age=record.Age)


def read_module_identity(module_path) -> ModuleIdentity:
    """Read a module from disk once and parse its debug record."""
    try:
        with open(module_path, 'rb') as f:
            module_data = f.read()
    except OSError as e:
        raise ModuleReadError(f'could not read {module_path}: {e.strerror or e}') from e

    log.debug('read %d bytes from %s', len(module_data), module_path)
    return extract_module_identity(module_data)
