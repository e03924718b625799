from typing import List, Optional

import argparse
import asyncio
import logging
import sys

from rich import progress
from rich.console import Console

from . import __version__, config
from .cabinet import delete_archive, extract_archive
from .download import fetch_archive
from .errors import UnityPdbError
from .extract import ModuleIdentity, read_module_identity
from .locator import LocatorRecord, derive_locator

log = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
            prog='unity-pdb',
            description='Download the PDB of a module from the Unity symbol server.')
    parser.add_argument('-i', '--input', type=str, required=True, help='Path to PE module')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser.parse_args(argv)


def print_identity(identity: ModuleIdentity, locator: LocatorRecord) -> None:
    print(f'PDB filename: {identity.symbol_file_name}')
    print(f'PDB signature: {identity.record_signature}')
    print(f'PDB age: {identity.record_age}')
    print(f'Lookup key: {locator.lookup_key}')
    print(f'Archive path: {locator.archive_path}')
    print(f'PDB path: {locator.symbol_file_path}')


async def download(locator: LocatorRecord) -> int:
    columns = (
        progress.SpinnerColumn(),
        progress.TextColumn('{task.description}'),
        progress.BarColumn(),
        progress.DownloadColumn(),
        progress.TimeRemainingColumn(),
    )
    with progress.Progress(*columns) as p:
        task = p.add_task('Download cab file', total=None)

        def report(written: int, total: int) -> None:
            p.update(task, completed=written, total=total)

        return await fetch_archive(locator.lookup_key, locator.archive_path, progress=report)


def extract(locator: LocatorRecord) -> int:
    with Console().status('Extract cab file'):
        return extract_archive(locator.archive_path, locator.symbol_file_path)


async def run(module_path: str) -> None:
    print(f'Input DLL file: {module_path}')

    identity = read_module_identity(module_path)
    locator = derive_locator(identity, module_path)
    print_identity(identity, locator)

    size = await download(locator)
    log.info('downloaded %d bytes to %s', size, locator.archive_path)

    entries = extract(locator)
    log.info('extracted %d entries to %s', entries, locator.symbol_file_path)

    delete_archive(locator.archive_path)

    print(f'PDB written to {locator.symbol_file_path}')


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=config.LOG_LEVEL, format='%(levelname)s %(name)s: %(message)s')

    try:
        asyncio.run(run(args.input))
    except UnityPdbError as e:
        print(f'{e.stage} failed: {e}', file=sys.stderr)
        return 1
    return 0
