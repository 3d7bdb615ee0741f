"""
tests/test_processor.py
End-to-end load → analyze → export through the public processor surface.
Sheets are built as in-memory row lists; one test goes through real xlsx bytes.
"""

import dataclasses
import io

import pytest
from openpyxl import Workbook, load_workbook

from commscope.errors import MalformedSheetError, ReadFailure
from commscope.processor import (
    analyze,
    analyze_platforms,
    export_to_excel,
    filter_contacts,
    load,
    load_file,
    load_rows,
    to_records,
)


CALL_HEADERS = ['#', 'Parties', 'Date', 'Time', 'Duration', 'Direction', 'Source']
MESSAGE_HEADERS = ['#', 'Source', 'Participants', 'Timestamp: Date', 'Timestamp: Time', 'Body']
CONTACT_HEADERS = ['#', 'Name', 'Entries', 'Source']


def _sheet(headers, rows):
    return [['Extraction report'], list(headers)] + [list(r) for r in rows]


def _call(parties, direction='Outgoing', duration='00:01:00', source='WhatsApp',
          time='10:00:00', number='1'):
    return [number, parties, '2024-01-01', time, duration, direction, source]


def _xlsx(sheet_rows) -> bytes:
    wb = Workbook()
    ws = wb.active
    for r in sheet_rows:
        ws.append(r)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


@pytest.fixture
def call_sheet():
    return _sheet(CALL_HEADERS, [
        _call('+15551234567 Bob', time='10:00:00', number='1'),
        _call('+15551234567 Bobby', 'Incoming', '00:02:30', time='11:00:00', number='2'),
        _call('+15559876543 Alice', time='12:00:00', number='3'),
        _call('0A1B2C3D-4E5F-6A7B-8C9D-0E1F2A3B4C5D Carol', source='Signal',
              time='13:00:00', number='4'),
        _call('+15550000000 Eve', source='KnowledgeC', time='14:00:00', number='5'),
        _call('+15551234567 Bob', time='10:00:00', number='6'),          # exact repeat
        _call('+15551234567 Bob', time='15:00:00', number='7 (1)'),      # duplicate marker
        _call('5552223333 Dan', source=None, time='16:00:00', number='8'),
    ])


# ── LOAD ─────────────────────────────────────────────────────

class TestLoad:

    def test_filtered_row_count(self, call_sheet):
        log = load_rows(call_sheet, 'call')
        assert log.row_count == 5
        assert log.stats == {'raw_rows': 8, 'kept_rows': 5}

    def test_loaded_log_is_immutable(self, call_sheet):
        log = load_rows(call_sheet, 'call')
        with pytest.raises(dataclasses.FrozenInstanceError):
            log.kind = 'message'

    def test_hint_stored_lowercase(self, call_sheet):
        assert load_rows(call_sheet, 'call', 'WhatsApp').source_hint == 'whatsapp'

    def test_unknown_kind_rejected(self, call_sheet):
        with pytest.raises(ValueError):
            load_rows(call_sheet, 'sms')

    def test_missing_header_aborts_load(self):
        with pytest.raises(MalformedSheetError):
            load_rows([['title only']], 'call')

    def test_load_from_xlsx_bytes(self, call_sheet):
        log = load(_xlsx(call_sheet), 'call')
        assert log.row_count == 5

    def test_load_file(self, tmp_path, call_sheet):
        path = tmp_path / 'calls.xlsx'
        path.write_bytes(_xlsx(call_sheet))
        assert load_file(path, 'call').row_count == 5

    def test_load_unreadable_bytes(self):
        with pytest.raises(ReadFailure):
            load(b'\x00\x01garbage', 'call')

    def test_header_only_sheet_loads_empty(self):
        log = load_rows(_sheet(CALL_HEADERS, []), 'call')
        assert log.row_count == 0
        assert log
        assert analyze(log) == []


# ── PLATFORM TALLY ───────────────────────────────────────────

class TestAnalyzePlatforms:

    def test_tally_sums_to_filtered_rows(self, call_sheet):
        log = load_rows(call_sheet, 'call')
        tallies = analyze_platforms(log)
        assert sum(t.count for t in tallies) == log.row_count

    def test_excluded_source_absent(self, call_sheet):
        tallies = analyze_platforms(load_rows(call_sheet, 'call'))
        platforms = [t.platform for t in tallies]
        assert 'KnowledgeC' not in platforms
        assert platforms == ['Signal', 'Natif', 'WhatsApp']

    def test_message_tally_defaults_native_messages(self):
        sheet = _sheet(MESSAGE_HEADERS, [
            ['1', None, 'alice Alice', '2024-01-01', '10:00', 'hi'],
            ['2', 'Signal', 'bob Bob', '2024-01-01', '10:01', 'yo'],
            ['3', None, 'alice Alice', '2024-01-01', '10:02', 'hey'],
        ])
        tallies = analyze_platforms(load_rows(sheet, 'message'))
        assert [(t.platform, t.count) for t in tallies] == [('Signal', 1), ('Native Messages', 2)]


# ── PARTNER ANALYSIS ─────────────────────────────────────────

class TestAnalyze:

    def test_single_row_scenario(self):
        sheet = _sheet(CALL_HEADERS, [_call('+15551234567 Bob')])
        log = load_rows(sheet, 'call', 'whatsapp')
        records = to_records(analyze(log, 'WhatsApp'), 'call')
        assert records == [{
            'Identifier':    '15551234567',
            'Name':          'Bob',
            'Nombre_appels': 1,
            'Appel_emis':    1,
            'Appel_recu':    0,
            'Duree_totale':  '00:01:00',
        }]

    def test_source_filter_and_names(self, call_sheet):
        partners = analyze(load_rows(call_sheet, 'call'), 'WhatsApp')
        assert [p.identifier for p in partners] == ['15551234567', '15559876543']
        bob = partners[0]
        assert bob.name == 'Bob, Bobby'
        assert (bob.total_count, bob.outgoing_count, bob.incoming_count) == (2, 1, 1)
        assert bob.total_duration_sec == 210

    def test_load_hint_used_when_analyze_has_none(self, call_sheet):
        partners = analyze(load_rows(call_sheet, 'call', 'Signal'))
        assert len(partners) == 1
        assert partners[0].identifier == '0A1B2C3D4E5F6A7B8C9D0E1F2A3B4C5D'
        assert partners[0].name == 'Carol'

    def test_excluded_source_never_analysed(self, call_sheet):
        partners = analyze(load_rows(call_sheet, 'call'))
        assert '15550000000' not in {p.identifier for p in partners}
        assert analyze(load_rows(call_sheet, 'call'), 'KnowledgeC') == []

    def test_appended_duplicate_does_not_change_output(self, call_sheet):
        before = analyze(load_rows(call_sheet, 'call'), 'whatsapp')
        after = analyze(load_rows(call_sheet + [call_sheet[2]], 'call'), 'whatsapp')
        assert before == after

    def test_two_loads_identical(self, call_sheet):
        assert analyze(load_rows(call_sheet, 'call')) == analyze(load_rows(call_sheet, 'call'))

    def test_repeated_analysis_of_one_log(self, call_sheet):
        log = load_rows(call_sheet, 'call')
        first = analyze(log, 'whatsapp')
        analyze(log, 'signal')
        assert analyze(log, 'whatsapp') == first

    def test_unknown_platform_gives_empty_result(self, call_sheet):
        assert analyze(load_rows(call_sheet, 'call'), 'Telegram') == []

    def test_top_n_bound(self):
        rows = [_call(f'555000{i:04d} P{i}', time=str(i), number=str(i)) for i in range(30)]
        partners = analyze(load_rows(_sheet(CALL_HEADERS, rows), 'call'))
        assert len(partners) == 15

    def test_messages(self):
        sheet = _sheet(MESSAGE_HEADERS, [
            ['1', 'Snapchat', 'alice Alice\nbob Bob', '2024-01-01', '10:00', 'hi'],
            ['2', 'Snapchat', 'alice Ali', '2024-01-01', '10:01', 'yo'],
            ['3', 'Snapchat', 'alice Alice', None, None, None],
        ])
        records = to_records(analyze(load_rows(sheet, 'message'), 'snapchat'), 'message')
        assert records == [
            {'Identifier': 'alice', 'Name': 'Ali, Alice', 'Nombre_messages': 2},
            {'Identifier': 'bob', 'Name': 'Bob', 'Nombre_messages': 1},
        ]

    def test_contact_log_has_no_partner_analysis(self):
        log = load_rows(_sheet(CONTACT_HEADERS, [['1', 'Bob', 'Phone: 555', 'Signal']]), 'contact')
        with pytest.raises(ValueError):
            analyze(log)


# ── CONTACT LISTS ────────────────────────────────────────────

class TestContacts:

    @pytest.fixture
    def contact_log(self):
        sheet = _sheet(CONTACT_HEADERS, [
            ['1', 'Bob', 'Phone: +1 555 123 4567\nBob Dupont', 'WhatsApp'],
            ['2', 'Ann', 'Phone: +1 555 000 1111', None],
            ['3', 'Bob', 'Bob DUPONT', 'Signal'],
            ['4 (1)', 'Bob', 'Bob Dupont', 'Signal'],
            ['5', 'Eve', 'x', 'Recents'],
        ])
        return load_rows(sheet, 'contact')

    def test_volume_first_seen_order(self, contact_log):
        tallies = analyze_platforms(contact_log)
        assert [(t.platform, t.count) for t in tallies] == [
            ('WhatsApp', 1), ('Natif', 1), ('Signal', 1),
        ]

    def test_filter_by_name(self, contact_log):
        assert [c.number for c in filter_contacts(contact_log, name_contains='dupont')] == ['1', '3']

    def test_filter_by_name_and_source(self, contact_log):
        rows = filter_contacts(contact_log, name_contains='dupont', source='Signal')
        assert [c.number for c in rows] == ['3']

    def test_source_filter_is_exact(self, contact_log):
        assert filter_contacts(contact_log, source='signal') == []
        assert [c.number for c in filter_contacts(contact_log, source='Natif')] == ['2']

    def test_filter_needs_contact_log(self, call_sheet):
        with pytest.raises(ValueError):
            filter_contacts(load_rows(call_sheet, 'call'))


# ── EXPORT ───────────────────────────────────────────────────

class TestExportToExcel:

    def test_partner_export(self, tmp_path, call_sheet):
        partners = analyze(load_rows(call_sheet, 'call'), 'whatsapp')
        out = tmp_path / 'Appels_whatsapp.xlsx'
        export_to_excel(partners, out, kind='call')

        wb = load_workbook(out)
        ws = wb.active
        assert ws.title == 'Appels'
        rows = list(ws.iter_rows(values_only=True))
        assert rows[0] == ('Identifier', 'Name', 'Nombre_appels', 'Appel_emis',
                           'Appel_recu', 'Duree_totale')
        assert rows[1] == ('15551234567', 'Bob, Bobby', 2, 1, 1, '00:03:30')
        assert len(rows) == 3

    def test_tally_export(self, tmp_path, call_sheet):
        out = tmp_path / 'stats.xlsx'
        export_to_excel(analyze_platforms(load_rows(call_sheet, 'call')), out, kind='call')
        ws = load_workbook(out).active
        assert ws.title == 'Statistiques'
        assert ws['A1'].value == 'Plateforme'
        assert ws['B1'].value == "Nombre d'appels"

    def test_plain_records_pass_through(self, tmp_path):
        out = tmp_path / 'r.xlsx'
        data = export_to_excel([{'A': 1}], out, kind='message')
        assert out.read_bytes() == data
        assert load_workbook(out).active.title == 'Conversations'
