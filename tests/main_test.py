from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

import pytest

import main as main_module
from config import AppSettings, DexFeeSchedule
from tests.constants import BTC_P2PKH_ADDRESS


@pytest.fixture(autouse=True)
def _static_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    settings = AppSettings(_env_file=None)  # type: ignore[call-arg]
    monkeypatch.setattr(main_module, "config", lambda: settings)


def _write_json(path: Path, payload: dict) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_main_prints_json_plan(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    request_path = _write_json(
        tmp_path / "request.json",
        {"type": "withdraw", "amount": "1000", "payment_method": "external_wallet", "recipient": BTC_P2PKH_ADDRESS},
    )
    balance_path = _write_json(tmp_path / "balance.json", {"available_for_spending": "2500"})

    exit_code = main_module.main(["--request", str(request_path), "--balance", str(balance_path), "--json"])

    assert exit_code == 0
    plan = json.loads(capsys.readouterr().out)
    assert plan["routing_plan"]["to_chain"] == "BTC"
    assert Decimal(plan["fee_breakdown"]["dex"]) == Decimal("8")


def test_main_legacy_dex_schedule(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    request_path = _write_json(
        tmp_path / "request.json",
        {"type": "withdraw", "amount": "1000", "payment_method": "external_wallet", "recipient": BTC_P2PKH_ADDRESS},
    )
    balance_path = _write_json(tmp_path / "balance.json", {"available_for_spending": "2500"})

    main_module.main(
        ["--request", str(request_path), "--balance", str(balance_path), "--dex-schedule", "legacy", "--json"]
    )

    plan = json.loads(capsys.readouterr().out)
    assert Decimal(plan["fee_breakdown"]["dex"]) == Decimal("2")


def test_main_reports_rejection(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    request_path = _write_json(tmp_path / "request.json", {"type": "buy", "amount": "100", "asset": "BTC"})

    exit_code = main_module.main(["--request", str(request_path)])

    assert exit_code == 1
    assert "Rejected (routing): Insufficient balance for buy transaction" in capsys.readouterr().out


def test_main_rejects_non_object_request(tmp_path: Path) -> None:
    request_path = tmp_path / "request.json"
    request_path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ValueError):
        main_module.main(["--request", str(request_path)])


def test_dex_schedule_is_refused_with_fee_rate_service(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    settings = AppSettings(_env_file=None, fee_rates_url="https://rates.example.com")  # type: ignore[call-arg]
    monkeypatch.setattr(main_module, "config", lambda: settings)
    request_path = _write_json(tmp_path / "request.json", {"type": "add", "amount": "100", "payment_method": "paypal"})

    with pytest.raises(SystemExit) as exc_info:
        main_module.main(["--request", str(request_path), "--dex-schedule", "legacy"])

    assert exc_info.value.code == 2
    with pytest.raises(ValueError):
        main_module.build_engine(dex_schedule=DexFeeSchedule.LEGACY)
