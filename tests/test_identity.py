"""
tests/test_identity.py
Partner extraction from Parties / Participants cells, per platform rule set.
"""

import pytest

from commscope.extractors.identity import (
    FALLBACK_RULES,
    ID_PHONE,
    ID_USERNAME,
    ID_UUID,
    PLATFORM_RULES,
    UNKNOWN_NAME,
    extract_identities,
    normalize_identifier,
    parse_line,
    rules_for,
)


# ── RULE DISPATCH ────────────────────────────────────────────

class TestRuleDispatch:

    def test_hint_is_case_insensitive(self):
        assert rules_for('WhatsApp') is PLATFORM_RULES['whatsapp']
        assert rules_for(' SIGNAL ') is PLATFORM_RULES['signal']

    def test_missing_or_unknown_hint_uses_fallback(self):
        assert rules_for(None) is FALLBACK_RULES
        assert rules_for('') is FALLBACK_RULES
        assert rules_for('Telegram') is FALLBACK_RULES


# ── SNAPCHAT ─────────────────────────────────────────────────

class TestSnapchat:

    def test_username_and_name(self):
        ident = parse_line('john_doe John Doe', 'snapchat')
        assert ident.identifier == 'john_doe'
        assert ident.display_name == 'John Doe'
        assert ident.id_kind == ID_USERNAME

    def test_username_alone_matches_nothing(self):
        assert parse_line('jane.doe', 'snapchat') is None


# ── WHATSAPP ─────────────────────────────────────────────────

class TestWhatsApp:

    def test_phone_and_name(self):
        ident = parse_line('+15551234567 Bob', 'whatsapp')
        assert ident.identifier == '15551234567'
        assert ident.display_name == 'Bob'
        assert ident.id_kind == ID_PHONE

    def test_jid_suffix(self):
        ident = parse_line('33612345678@s.whatsapp.net Marie Curie', 'whatsapp')
        assert ident.identifier == '33612345678'
        assert ident.display_name == 'Marie Curie'

    def test_missing_name(self):
        assert parse_line('+15551234567', 'whatsapp').display_name == UNKNOWN_NAME

    def test_no_digits_no_match(self):
        assert parse_line('alice Alice', 'whatsapp') is None

    def test_too_few_digits_no_match(self):
        assert parse_line('1234 Bob', 'whatsapp') is None


# ── SIGNAL ───────────────────────────────────────────────────

class TestSignal:

    def test_uuid(self):
        ident = parse_line('0A1B2C3D-4E5F-6A7B-8C9D-0E1F2A3B4C5D Alice', 'signal')
        assert ident.id_kind == ID_UUID
        assert ident.identifier == '0A1B2C3D4E5F6A7B8C9D0E1F2A3B4C5D'
        assert ident.display_name == 'Alice'

    def test_lowercase_uuid(self):
        ident = parse_line('0a1b2c3d-4e5f-6a7b-8c9d-0e1f2a3b4c5d', 'signal')
        assert ident.id_kind == ID_UUID
        assert ident.display_name == UNKNOWN_NAME

    def test_spaced_phone(self):
        ident = parse_line('+33 6 12 34 56 78 Jean', 'signal')
        assert ident.id_kind == ID_PHONE
        assert ident.identifier == '33612345678'
        assert ident.display_name == 'Jean'

    def test_bare_digit_run(self):
        ident = parse_line('12345 Bob', 'signal')
        assert ident.identifier == '12345'


# ── GENERIC FALLBACK ─────────────────────────────────────────

class TestFallback:

    def test_phone_with_separators(self):
        ident = parse_line('555-123-4567 Bob', None)
        assert ident.identifier == '5551234567'
        assert ident.display_name == 'Bob'

    def test_username_when_no_phone(self):
        ident = parse_line('alice_w Alice W', 'Telegram')
        assert ident.identifier == 'alice_w'
        assert ident.display_name == 'Alice W'
        assert ident.id_kind == ID_USERNAME

    def test_phone_pattern_tried_before_username(self):
        # short digit runs inside a username still read as a phone
        ident = parse_line('user12345 Bob', None)
        assert ident.id_kind == ID_PHONE
        assert ident.identifier == '12345'

    def test_single_word_matches_nothing(self):
        assert extract_identities('Moi', None) == []
        assert parse_line('Unknown', 'Telegram') is None


# ── ROLE PREFIXES ────────────────────────────────────────────

class TestRolePrefix:

    @pytest.mark.parametrize('prefix', ['From', 'To', 'General'])
    def test_prefix_captured_and_stripped(self, prefix):
        ident = parse_line(f'{prefix}: +15551234567 Bob', 'whatsapp', with_roles=True)
        assert ident.role_prefix == prefix
        assert ident.identifier == '15551234567'
        assert ident.display_name == 'Bob'

    def test_prefix_before_username(self):
        ident = parse_line('To: alice Alice', 'snapchat', with_roles=True)
        assert ident.identifier == 'alice'
        assert ident.role_prefix == 'To'

    def test_no_prefix_stripping_for_messages(self):
        ident = parse_line('From: alice Alice', 'snapchat')
        assert ident.identifier == 'From:'
        assert ident.role_prefix is None


# ── MULTI-LINE CELLS ─────────────────────────────────────────

class TestExtractIdentities:

    def test_one_identity_per_line(self):
        text = 'From: 5551234567 Bob\nTo: 5559876543 Alice'
        idents = extract_identities(text, None, with_roles=True)
        assert [i.identifier for i in idents] == ['5551234567', '5559876543']

    def test_repeated_partner_collapsed_first_wins(self):
        text = '555-123-4567 Bob\n5551234567 Robert\n555 123 4567'
        idents = extract_identities(text, None)
        assert len(idents) == 1
        assert idents[0].display_name == 'Bob'

    def test_blank_lines_skipped(self):
        assert extract_identities('\n   \n', None) == []

    def test_empty_text(self):
        assert extract_identities('', 'whatsapp') == []
        assert extract_identities(None, 'whatsapp') == []

    def test_unmatched_lines_skipped_silently(self):
        idents = extract_identities('hello there\n+15551234567 Bob', 'whatsapp')
        assert len(idents) == 1


class TestNormalizeIdentifier:

    def test_separators_removed(self):
        assert normalize_identifier('555-123.45 67', ID_PHONE) == '5551234567'

    def test_leading_plus_removed_for_phones_only(self):
        assert normalize_identifier('+15551234567', ID_PHONE) == '15551234567'
        assert normalize_identifier('+nick', ID_USERNAME) == '+nick'
