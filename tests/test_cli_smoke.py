from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest

from cli import main


def _copy_mini_repo_fixture(root: Path) -> None:
    fixture_repo = Path(__file__).parent / "fixtures" / "mini_repo"
    shutil.copytree(fixture_repo, root)


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    _copy_mini_repo_fixture(root)
    return root


def test_check_reports_failed_directive_and_exits_one(
    repo_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = main(["check", str(repo_root)])

    captured = capsys.readouterr()
    assert exit_code == 1
    assert "src/shop/checkout.py:10:" in captured.err
    assert "undefined instance_method `shop.checkout.missing`" in captured.err
    assert captured.out == ""


def test_check_exit_zero(repo_root: Path) -> None:
    assert main(["check", str(repo_root), "--exit-zero"]) == 0


def test_check_suppressions_text(
    repo_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    main(["check", str(repo_root), "--suppressions", "--exit-zero"])

    assert capsys.readouterr().out.splitlines() == [
        "rule LineLength disabled in unit src/shop/cart.py, lines 4-6",
        "rule LineLength disabled in unit src/shop/checkout.py, lines 6-10",
        "rule Naming disabled in unit src/shop/checkout.py, lines 3-10",
    ]


def test_check_suppressions_enabled_from_config(
    repo_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (repo_root / "annotate.toml").write_text(
        '[suppressions]\nenabled = true\nrules = ["Naming"]\n', encoding="utf-8"
    )

    main(["check", str(repo_root), "--exit-zero"])

    assert capsys.readouterr().out.splitlines() == [
        "rule Naming disabled in unit src/shop/checkout.py, lines 3-10",
    ]


def test_check_json_output(
    repo_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = main(
        [
            "check",
            str(repo_root),
            "--format",
            "json",
            "--suppressions",
            "--changes",
            "--workers",
            "2",
        ]
    )

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert [d["line"] for d in payload["diagnostics"]] == [10]
    assert payload["diagnostics"][0]["errors"][0]["type"] == "UnresolvedSymbol"
    assert payload["suppressions"]["Naming"] == [
        {"unit": "src/shop/checkout.py", "start_line": 3, "end_line": 10}
    ]
    assert {c["qualified_name"] for c in payload["changes"]} == {
        "shop.cart.Cart._subtotal",
        "shop.cart.Cart.empty",
        "shop.cart.Cart.MAX_ITEMS",
        "shop.cart.TAX_RATE",
        "shop.checkout.checkoutNow",
    }


def test_symbols_lists_resolved_visibility(
    repo_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = main(["symbols", str(repo_root), "--format", "json"])

    symbols = {
        (s["qualified_name"], s["kind"]): s["visibility"]
        for s in json.loads(capsys.readouterr().out)
    }
    assert exit_code == 0
    assert symbols[("shop.cart.Cart.total", "instance_method")] == "public"
    assert symbols[("shop.cart.Cart._subtotal", "instance_method")] == "private"
    assert symbols[("shop.cart.Cart.empty", "class_method")] == "private"
    assert symbols[("shop.cart.Cart", "constant")] == "public"
    assert symbols[("shop.cart.DEFAULT_NOTE", "constant")] == "public"


def test_symbols_text_output(
    repo_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    main(["symbols", str(repo_root)])

    lines = capsys.readouterr().out.splitlines()
    assert any(
        line.split() == ["private", "class_method", "shop.cart.Cart.empty"]
        for line in lines
    )


def test_invalid_config_exits_two(
    repo_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (repo_root / "annotate.toml").write_text("bogus = 1\n", encoding="utf-8")

    assert main(["check", str(repo_root)]) == 2
    assert "error: Invalid config" in capsys.readouterr().err


def test_missing_root_exits_two(tmp_path: Path) -> None:
    assert main(["check", str(tmp_path / "nope")]) == 2
