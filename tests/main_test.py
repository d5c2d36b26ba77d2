from datetime import date
from pathlib import Path
from typing import Any

import pytest

import main
from domain.reconciliation import DiscrepancyResult, DiscrepancyStatus
from services.analytics import CashAnalytics, DrawerDiscrepancy


def test_main_configures_logging(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(main.logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    main.main(["--db", str(tmp_path / "cash.db"), "init-db", "--no-seed"])

    assert len(calls) == 1
    assert calls[0]["format"] == main.LOG_FORMAT
    assert (tmp_path / "cash.db").exists()


def test_report_shows_signed_discrepancy(capsys: pytest.CaptureFixture[str]) -> None:
    short = DiscrepancyResult(
        status=DiscrepancyStatus.SHORT,
        closing_record_id=7,
        opening_record_id=3,
        amount_cents=550,
        expected_cents=34_550,
        actual_cents=34_000,
        opening_amount_cents=30_000,
        sms_cash_cents=4_550,
    )
    analytics = CashAnalytics(
        drawer_totals=[],
        deposit_trends=[],
        drawer_discrepancies=[
            DrawerDiscrepancy(
                drawer_id="front-counter", drawer_name="Front Counter", day=date(2024, 1, 8), result=short
            )
        ],
    )

    main.render_report(analytics)

    assert "count #7: short -$5.50" in capsys.readouterr().out
