"""Tests for backup files and the CSV export."""

import json
from datetime import date
from decimal import Decimal

import pytest

from investtrack.models.portfolio import AppState, Payment, PaymentType
from investtrack.services.backup import (
    CSV_FILENAME,
    BackupFormatError,
    backup_filename,
    export_backup,
    export_transactions_csv,
    parse_backup,
)


class TestBackupFiles:

    def test_filename(self):
        assert backup_filename(date(2024, 7, 9)) == "InvestTrack_Backup_2024-07-09.json"

    def test_export_is_indented_json(self, sample_state):
        content = export_backup(sample_state)
        assert content.startswith("{\n")
        assert json.loads(content)["customers"][0]["name"] == "Ayesha Khan"

    def test_export_then_parse(self, sample_state):
        assert parse_backup(export_backup(sample_state)) == sample_state

    def test_parse_accepts_bytes(self, sample_state):
        assert parse_backup(export_backup(sample_state).encode("utf-8")) == sample_state

    def test_settings_may_be_absent(self):
        state = parse_backup('{"customers": [], "investments": []}')
        assert state == AppState()

    @pytest.mark.parametrize("content", [
        "not json at all",
        "[1, 2, 3]",
        '{"customers": []}',
        '{"investments": []}',
        '{"customers": {}, "investments": []}',
    ])
    def test_rejects_non_backups(self, content):
        with pytest.raises(BackupFormatError):
            parse_backup(content)

    def test_rejects_invalid_records(self):
        content = json.dumps({
            "customers": [{"id": "c1"}],
            "investments": [],
        })
        with pytest.raises(BackupFormatError, match="invalid"):
            parse_backup(content)


class TestCsvExport:

    def test_filename(self):
        assert CSV_FILENAME == "transactions_export.csv"

    def test_rows_in_stored_order(self, sample_state):
        lines = export_transactions_csv(sample_state).split("\n")
        assert lines == [
            "Date,Type,Amount,Direction,Investment,Customer",
            "2024-02-01,installment,15000,IN,Shop Expansion,Ayesha Khan",
            "2024-03-01,downpayment,5000,IN,Shop Expansion,Ayesha Khan",
            "2024-04-01,installment,8000,IN,Rickshaw,Bilal Ahmed",
        ]

    def test_lend_is_outgoing(self, sample_state):
        sample_state.payments.append(Payment(
            investment_id="i2", amount=Decimal("2500.5"),
            date=date(2024, 5, 1), type=PaymentType.LEND,
        ))
        last = export_transactions_csv(sample_state).split("\n")[-1]
        assert last == "2024-05-01,lend,2500.5,OUT,Rickshaw,Bilal Ahmed"

    def test_header_only_when_empty(self):
        assert export_transactions_csv(AppState()) == "Date,Type,Amount,Direction,Investment,Customer"
