"""
Tests for scripts/periods.py against a SQLite file database.
"""

import importlib.util
from datetime import date, timedelta
from pathlib import Path

import pytest

from tour_kernel.db.engine import create_tables, init_engine_from_url, reset_engine, session_scope
from tour_kernel.domain.dtos import Company, EntryKind, FinancialEntry, Reservation
from tour_services import SqlAlchemyStore

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "periods.py"


def load_cli():
    spec = importlib.util.spec_from_file_location("periods_cli", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def db_url(tmp_path):
    url = f"sqlite:///{tmp_path / 'ledger.db'}"
    init_engine_from_url(url)
    create_tables()
    with session_scope() as session:
        store = SqlAlchemyStore(session)
        store.upsert_financial_entry(
            FinancialEntry(
                id="e1", entry_date=date(2024, 3, 5), kind=EntryKind.INCOME,
                amount="500", currency="TRY",
            )
        )
        store.upsert_financial_entry(
            FinancialEntry(
                id="e2", entry_date=date(2024, 5, 1), kind=EntryKind.EXPENSE,
                amount="40", currency="EUR", category="Fuel",
            )
        )
        store.upsert_company(Company(id="co-1", name="Blue Agency"))
        store.upsert_reservation(
            Reservation(
                id="res-1", tour_date=date(2024, 7, 10), total_amount="400",
                currency="EUR", company_id="co-1",
            )
        )
    yield url
    reset_engine()


@pytest.fixture
def cli():
    return load_cli()


class TestPeriodsCli:
    def test_recalculate_then_summary(self, cli, db_url, capsys):
        assert cli.main(["--db-url", db_url, "recalculate", "--year", "2024"]) == 0
        out = capsys.readouterr().out
        assert "Recompute 2024: done" in out
        assert "2024-03, 2024-05, 2024-07" in out

        assert cli.main(["--db-url", db_url, "summary", "2024"]) == 0
        out = capsys.readouterr().out
        assert "Year 2024 (3 periods)" in out
        assert "TRY" in out

    def test_delete_missing_period_fails(self, cli, db_url, capsys):
        assert cli.main(["--db-url", db_url, "delete-period", "2024", "8"]) == 1
        assert "PERIOD_NOT_FOUND" in capsys.readouterr().err

    def test_delete_year(self, cli, db_url, capsys):
        cli.main(["--db-url", db_url, "recalculate"])
        capsys.readouterr()

        assert cli.main(["--db-url", db_url, "delete-year", "2024"]) == 0
        assert "Deleted 3 period(s)" in capsys.readouterr().out

    def test_resync_and_outstanding(self, cli, db_url, capsys):
        assert cli.main(["--db-url", db_url, "resync-receivables"]) == 0
        assert "Created: 1" in capsys.readouterr().out

        assert cli.main(["--db-url", db_url, "outstanding"]) == 0
        assert "co-1: 400.00 EUR (1 debt(s))" in capsys.readouterr().out

    def test_bad_config(self, cli, db_url, tmp_path, capsys):
        bad = tmp_path / "bad.yaml"
        bad.write_text("ledger:\n  nope: 1\n", encoding="utf-8")
        assert cli.main(["--db-url", db_url, "--config", str(bad), "outstanding"]) == 1
        assert "Failed to load settings" in capsys.readouterr().err

    def test_schedule_uses_configured_window(self, cli, db_url, tmp_path, capsys):
        soon = date.today() + timedelta(days=5)
        with session_scope() as session:
            SqlAlchemyStore(session).upsert_reservation(
                Reservation(
                    id="res-2", tour_date=soon, destination_name="Ephesus",
                    pickup_time="07:30", serial_number="R-0002",
                )
            )
        config = tmp_path / "window.yaml"
        config.write_text("ledger:\n  urgency_window_days: 7\n", encoding="utf-8")

        assert cli.main(["--db-url", db_url, "--config", str(config), "schedule"]) == 0
        out = capsys.readouterr().out
        assert "Urgent window: 7 day(s)" in out
        assert "Ephesus: 1 reservation(s)  URGENT (1)" in out
        assert f"  {soon.isoformat()} 07:30 R-0002" in out

        assert cli.main(["--db-url", db_url, "schedule"]) == 0
        assert "Ephesus: 1 reservation(s)\n" in capsys.readouterr().out
