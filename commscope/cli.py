"""
commscope/cli.py
Command-line interface for commscope.

USAGE:
  python -m commscope.cli calls.xlsx --kind call --source WhatsApp
  python -m commscope.cli chats.xlsx --kind message --platforms
  python -m commscope.cli contacts.xlsx --kind contact --name-contains dupont

EXAMPLES:
  # Top 15 WhatsApp call partners, exported to Appels_WhatsApp.xlsx
  python -m commscope.cli calls.xlsx -k call -s WhatsApp --export

  # Platform breakdown of a conversation export
  python -m commscope.cli chats.xlsx -k message --platforms

  # JSON report with a digest of the partner and platform records
  python -m commscope.cli calls.xlsx -k call -s Signal --json-report report.json
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from commscope import __version__
from commscope.config import export_path, load_config
from commscope.errors import MalformedSheetError, ReadFailure
from commscope.exporters.excel_exporter import build_filename
from commscope.models.record import RECORD_KINDS
from commscope.processor import (
    analyze,
    analyze_platforms,
    export_to_excel,
    filter_contacts,
    load_file,
    to_records,
)

logger = logging.getLogger(__name__)

GREEN  = '\033[92m'
YELLOW = '\033[93m'
RED    = '\033[91m'
CYAN   = '\033[96m'
RESET  = '\033[0m'
BOLD   = '\033[1m'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog        = 'commscope',
        description = 'commscope - partner analysis for extraction-tool spreadsheet exports',
        formatter_class = argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        'file',
        type = Path,
        help = 'Exported .xlsx file (title row, header row, then data)',
    )
    parser.add_argument(
        '--kind', '-k',
        choices = RECORD_KINDS,
        default = 'call',
        help    = 'Record kind in the file (default: call)',
    )
    parser.add_argument(
        '--source', '-s',
        default = None,
        help    = 'Platform to analyse, e.g. WhatsApp, Signal, Snapchat (default: all rows)',
    )
    parser.add_argument(
        '--platforms', '-p',
        action = 'store_true',
        help   = 'Show row counts per platform instead of top partners',
    )
    parser.add_argument(
        '--top', '-n',
        type    = int,
        default = None,
        help    = 'Number of partners to keep (default: top_n from config, 15)',
    )
    parser.add_argument(
        '--name-contains',
        default = None,
        help    = 'Contact kind only - keep contacts whose Entries contain this text',
    )
    parser.add_argument(
        '--export', '-e',
        action = 'store_true',
        help   = 'Write results to <Kind>_<source|tous>.xlsx in export_dir',
    )
    parser.add_argument(
        '--output', '-o',
        type    = Path,
        default = None,
        help    = 'Explicit xlsx output path (implies --export)',
    )
    parser.add_argument(
        '--json-report',
        type    = Path,
        default = None,
        help    = 'Write a JSON report with a SHA-256 digest of the result records',
    )
    parser.add_argument(
        '--verbose', '-v',
        action = 'store_true',
        help   = 'Enable debug logging',
    )
    parser.add_argument(
        '--version',
        action  = 'version',
        version = f'%(prog)s {__version__}',
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # ── LOGGING SETUP ────────────────────────────────────────
    logging.basicConfig(
        level   = logging.DEBUG if args.verbose else logging.INFO,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
    )

    config = load_config()
    source = args.source or config.get('default_source')
    top_n  = args.top if args.top is not None else config.get('top_n', 15)

    # ── LOAD ─────────────────────────────────────────────────
    _step(f"Loading {args.kind} export {CYAN}{args.file}{RESET}...")
    t0 = time.time()
    try:
        log = load_file(args.file, args.kind, source)
    except (ReadFailure, MalformedSheetError) as e:
        _print(f"{RED}Error: {e}{RESET}")
        return 1
    _ok(f"{log.row_count} rows kept of {log.stats.get('raw_rows', 0)} in {_elapsed(t0)}")

    # ── ANALYSE ──────────────────────────────────────────────
    tallies = analyze_platforms(log)
    partners = []
    if args.platforms:
        results = tallies
    elif args.kind == 'contact':
        results = filter_contacts(log, name_contains=args.name_contains, source=source)
    else:
        partners = results = analyze(log, source, limit=top_n)

    records = to_records(results, args.kind)
    _print_table(records)

    # ── EXPORT ───────────────────────────────────────────────
    if args.export or args.output:
        out = args.output or export_path(config, build_filename(args.kind, source))
        export_to_excel(results, out, kind=args.kind)
        _ok(f"Exported {len(records)} rows → {out}")

    if args.json_report:
        _write_json_report(args.json_report, log, partners, tallies, source, top_n)

    return 0


def _write_json_report(path, log, partners, tallies, source, top_n) -> None:
    from commscope.report import build_report
    from commscope.report_export import export_to_json

    report = build_report(log, partners, tallies, source=source)
    path.write_text(export_to_json(report, log, top_n=top_n), encoding='utf-8')
    _ok(f"JSON report → {path}")


# ── PRINT HELPERS ────────────────────────────────────────────

def _print_table(records) -> None:
    if not records:
        _print(f"  {YELLOW}No results.{RESET}")
        return
    columns = list(records[0].keys())
    widths = {
        c: min(max(len(str(c)), *(len(str(r.get(c, ''))) for r in records)), 40)
        for c in columns
    }
    _print('  ' + '  '.join(f"{BOLD}{str(c):<{widths[c]}}{RESET}" for c in columns))
    for r in records:
        _print('  ' + '  '.join(f"{str(r.get(c, ''))[:widths[c]]:<{widths[c]}}" for c in columns))


def _step(msg):  _print(f"  {CYAN}→{RESET} {msg}")
def _ok(msg):    _print(f"  {GREEN}✓{RESET} {msg}")
def _print(msg): print(msg)

def _elapsed(t0: float) -> str:
    s = time.time() - t0
    return f"{s:.1f}s" if s < 60 else f"{int(s//60)}m {int(s%60)}s"


if __name__ == '__main__':
    sys.exit(main())
