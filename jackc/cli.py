#!/usr/bin/env python3
"""
Jack Compiler command line driver.

Compiles .jack files, or every .jack file in a directory, to .vm files.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import compile_file
from .errors import JackError
from .vmwriter import LabelCounter

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = '.jack'
OUTPUT_SUFFIX = '.vm'


def collect_sources(path: Path) -> List[Path]:
    """Return the .jack files named by a path argument."""
    if path.is_dir():
        sources = sorted(p for p in path.iterdir()
                         if p.is_file() and p.suffix == SOURCE_SUFFIX)
        if not sources:
            logger.error(f'No {SOURCE_SUFFIX} files found in {path}')
        return sources
    if path.is_file() and path.suffix == SOURCE_SUFFIX:
        return [path]
    logger.error(f'Not a {SOURCE_SUFFIX} file or directory: {path}')
    return []


def output_path(source: Path, output_dir: Optional[Path]) -> Path:
    target_dir = output_dir if output_dir is not None else source.parent
    return target_dir / (source.stem + OUTPUT_SUFFIX)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog='jackc',
        description='Compile Jack classes to VM code.')

    parser.add_argument(
        'paths', nargs='+', metavar='PATH',
        help='A .jack file or a directory of .jack files.')
    parser.add_argument(
        '--output-dir', '-o', type=Path, default=None,
        help='Directory for the .vm files. Defaults to beside each source.')
    parser.add_argument(
        '--stdout', action='store_true', default=False,
        help='Print the VM code instead of writing .vm files.')
    parser.add_argument(
        '--verbose', '-v', action='store_true', default=False,
        help='Enable debug logging.')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s: %(message)s')

    # One counter for the whole run keeps labels unique across units
    labels = LabelCounter()
    failed = False

    for arg in args.paths:
        sources = collect_sources(Path(arg))
        if not sources:
            failed = True
            continue

        for source in sources:
            try:
                code = compile_file(source, labels)
            except JackError as e:
                logger.error(f'COMPILE ERROR: {e}')
                failed = True
                continue
            except OSError as e:
                logger.error(f'COMPILE ERROR: {source}: {e.strerror or e}')
                failed = True
                continue

            if args.stdout:
                sys.stdout.write(code)
                continue

            target = output_path(source, args.output_dir)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(code, encoding='utf-8')
            logger.info(f'Compiled {source} -> {target}')

    return 1 if failed else 0


if __name__ == '__main__':
    sys.exit(main())
