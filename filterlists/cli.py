#!/usr/bin/env python3
"""
Render an exported filter list locally.

Takes the YAML produced by GET /export/<token>, renders it against a local
definition corpus and prints the adblocker list.

Usage:
    filterlists-render exported-filter-list.yaml
    filterlists-render exported-filter-list.yaml --test-mode -o my-list.txt
    cat exported-filter-list.yaml | filterlists-render -
"""
import argparse
import logging
import sys

from filterlists.config import FILTERS_DIR, MAIN_DOMAIN
from filterlists.errors import CorruptInstance, MalformedDefinition
from filterlists.filters.corpus import FilterCorpus
from filterlists.logging_config import configure_logging
from filterlists.services.exporter import parse_export
from filterlists.services.materializer import ListMaterializer

logger = logging.getLogger('filterlists.cli')


def _read_export(path):
    if path == '-':
        return sys.stdin.read()
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def main(argv=None):
    parser = argparse.ArgumentParser(prog='filterlists-render', description='Render an exported filter list locally')
    parser.add_argument('export', help='Exported list (YAML), or - for stdin')
    parser.add_argument('--filters-dir', default=FILTERS_DIR, help='Directory of filter definitions')
    parser.add_argument('--test-mode', action='store_true', help='Render every filter in test mode')
    parser.add_argument('-o', '--output', help='Write the list to this file instead of stdout')
    args = parser.parse_args(argv)

    configure_logging()

    try:
        corpus = FilterCorpus.load(args.filters_dir)
        rendered = parse_export(_read_export(args.export), corpus)
    except (MalformedDefinition, CorruptInstance, OSError) as e:
        print(f'error: {e}', file=sys.stderr)
        return 1

    materializer = ListMaterializer(corpus, MAIN_DOMAIN)
    if args.output:
        with open(args.output, 'w', encoding='utf-8') as out:
            errors = materializer.render_to(out, rendered, test_mode=args.test_mode)
    else:
        errors = materializer.render_to(sys.stdout, rendered, test_mode=args.test_mode)

    if errors:
        logger.warning("%d unknown filters were skipped", len(errors))
    return 0


if __name__ == '__main__':
    sys.exit(main())
