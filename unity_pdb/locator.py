import os
from dataclasses import dataclass
from pathlib import Path

from . import config
from .errors import PathEncodingError
from .extract import ModuleIdentity


@dataclass(frozen=True)
class LocatorRecord:
    """Where a module's symbols live on the server and where they land locally."""

    module_path: Path
    symbol_file_path: Path
    archive_path: Path
    lookup_key: str


def build_lookup_key(identity: ModuleIdentity) -> str:
    # Example:
    # example.pdb/EFBEADDE0201040305060708090A0B0C1/example.pd_
    name = identity.module_base_name
    return (f'{name}{config.SYMBOL_FILE_EXTENSION}/'
            f'{identity.record_signature}{config.LOOKUP_AGE_TOKEN}/'
            f'{name}{config.COMPRESSED_SYMBOL_EXTENSION}')


def _sibling(directory: Path, file_name: str) -> Path:
    path = directory / file_name
    if path.parent != directory or path.name != file_name:
        raise PathEncodingError(f'{file_name!r} is not a plain file name')
    if '\0' in file_name:
        raise PathEncodingError(f'{file_name!r} contains a null byte')

    try:
        os.fsencode(path)
    except UnicodeEncodeError as e:
        raise PathEncodingError(f'{file_name!r} cannot be encoded for this filesystem') from e
    return path


def derive_locator(identity: ModuleIdentity, module_path) -> LocatorRecord:
    module_path = Path(module_path)
    directory = module_path.parent

    return LocatorRecord(
            module_path=module_path,
            symbol_file_path=_sibling(
                directory, identity.symbol_file_base_name + config.SYMBOL_FILE_EXTENSION),
            archive_path=_sibling(
                directory, identity.module_base_name + config.ARCHIVE_EXTENSION),
            lookup_key=build_lookup_key(identity))
